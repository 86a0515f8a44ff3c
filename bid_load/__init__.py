"""
Load generator for the auction bidding API.

Simulates many concurrent bidders: each virtual user logs in once,
then submits a fixed number of paced, randomized bids.
"""

__version__ = "0.1.0"
