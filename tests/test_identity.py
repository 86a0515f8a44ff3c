from bid_load.config import LoadConfig
from bid_load.identity import identity_for_ordinal, identity_index, login_for_index


def test_first_ordinal_maps_to_index_min():
    assert identity_index(1, 1, 100) == 1


def test_identities_cycle_past_the_pool():
    config = LoadConfig(auction_id=1, user_count=150, index_min=1, index_max=100)
    assert identity_for_ordinal(101, config) == identity_for_ordinal(1, config)
    assert identity_for_ordinal(150, config).index == 50
    assert identity_for_ordinal(100, config).index == 100


def test_sub_range():
    assert [identity_index(v, 20, 22) for v in range(1, 6)] == [20, 21, 22, 20, 21]


def test_inverted_range_uses_single_identity():
    assert {identity_index(v, 5, 3) for v in range(1, 10)} == {5}


def test_login_format():
    assert login_for_index(7, "k6buyer", "example.com") == "k6buyer007@example.com"
    assert login_for_index(7, "k6buyer", "example.com", "run2") == "k6buyer007-run2@example.com"
    assert login_for_index(1234, "b", "x.io") == "b1234@x.io"


def test_identity_carries_password():
    config = LoadConfig(auction_id=1, password="s3cret", user_prefix="bidder", user_domain="lelang.id")
    identity = identity_for_ordinal(3, config)
    assert identity.login == "bidder003@lelang.id"
    assert identity.password == "s3cret"
