"""Randomized, step-quantized bid amounts and the bid payload."""

import random
from dataclasses import dataclass


def quantized_range(min_bid: int, max_bid: int, step: int):
    """First and last multiples of step inside [min_bid, max_bid].

    The range is empty when last < first.
    """
    first = -(-min_bid // step) * step  # ceil to step
    last = (max_bid // step) * step
    return first, last


def random_bid_amount(min_bid: int, max_bid: int, step: int, rng=None) -> int:
    """
    Pick a bid uniformly among all multiples of step within [min_bid, max_bid].

    If no multiple of step lies in the range, the rounded-up lower bound is
    returned every time, even though it exceeds max_bid.
    """
    rng = rng or random
    first, last = quantized_range(min_bid, max_bid, step)
    if last < first:
        return first
    steps = (last - first) // step
    return first + rng.randint(0, steps) * step


@dataclass(frozen=True)
class BidRequest:
    auction_id: int
    amount: int

    def payload(self) -> dict:
        return {"lelang_id": self.auction_id, "harga_penawaran": self.amount}
