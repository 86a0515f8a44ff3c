import pytest

from bid_load.bids import BidRequest
from bid_load.diagnostics import BID_FAILED
from bid_load.submitter import BidSubmitter, Outcome, classify
from bid_load.transport import Response
from tests.fakes import FakeTransport, json_response


@pytest.mark.parametrize("status", [200, 201, 202])
def test_accepted_statuses(status):
    assert classify(Response(status=status)) is Outcome.SUCCESS


@pytest.mark.parametrize("status", [0, 204, 301, 400, 401, 409, 422, 500, 503])
def test_other_statuses_fail(status):
    assert classify(Response(status=status)) is Outcome.FAILURE


def test_transport_error_fails():
    assert classify(Response(status=200, error="ReadTimeout")) is Outcome.FAILURE


def test_submit_sends_bearer_token_and_payload(events):
    transport = FakeTransport()
    submitter = BidSubmitter(transport, "/pembeli/pengajuan-lelang", 10, sink=events.append)

    result = submitter.submit("tok", BidRequest(42, 1500), login="k6buyer001@example.com")

    assert result.outcome is Outcome.SUCCESS
    assert result.status == 201
    assert result.amount == 1500
    call = transport.calls[0]
    assert call["path"] == "/pembeli/pengajuan-lelang"
    assert call["headers"]["Authorization"] == "Bearer tok"
    assert call["payload"] == {"lelang_id": 42, "harga_penawaran": 1500}
    assert events == []


def test_rejected_bid_emits_diagnostic(events):
    transport = FakeTransport(bid=lambda p, h: json_response(422, {"message": "harga terlalu rendah" * 50}))
    submitter = BidSubmitter(transport, "/bid", 10, sink=events.append)

    result = submitter.submit("tok", BidRequest(42, 250), login="k6buyer002@example.com")

    assert result.outcome is Outcome.FAILURE
    assert result.error.status == 422
    assert len(events) == 1
    event = events[0]
    assert event.kind == BID_FAILED
    assert event.login == "k6buyer002@example.com"
    assert event.status == 422
    assert len(event.body) == 200


def test_submit_is_not_retried(events):
    transport = FakeTransport(bid=lambda p, h: Response(status=0, error="ConnectionError: refused"))
    submitter = BidSubmitter(transport, "/bid", 10, sink=events.append)

    result = submitter.submit("tok", BidRequest(42, 250))

    assert result.outcome is Outcome.FAILURE
    assert len(transport.calls) == 1
    assert events[0].error == "ConnectionError: refused"
