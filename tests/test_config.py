import pytest

from bid_load.config import LoadConfig, build_parser, config_from_args, describe, parse_duration_seconds
from bid_load.errors import ConfigError


class TestParseDuration:
    @pytest.mark.parametrize(
        "raw,expected",
        [("300s", 300.0), ("60m", 3600.0), ("1h", 3600.0), ("500ms", 0.5), ("2.5", 2.5), (7, 7.0)],
    )
    def test_formats(self, raw, expected):
        assert parse_duration_seconds(raw) == expected

    def test_garbage_is_config_error(self):
        with pytest.raises(ConfigError):
            parse_duration_seconds("soon")


class TestFromEnv:
    def test_defaults_without_env(self):
        config = LoadConfig.from_env({})
        assert config.base_url == "http://localhost:3333"
        assert config.login_path == "/auth/login"
        assert config.bid_path == "/pembeli/pengajuan-lelang"
        assert config.auction_id is None
        assert config.user_count == 100
        assert config.effective_index_max == 100
        assert (config.min_bid, config.max_bid, config.bid_step) == (250, 10_000_000, 250)
        assert config.login_timeout == 300.0

    def test_reads_environment_variable_names(self):
        config = LoadConfig.from_env(
            {
                "LELANG_ID": "42",
                "USER_COUNT": "150",
                "USER_INDEX_MAX": "100",
                "USER_EMAIL_SUFFIX": "run2",
                "USER_PACE_MS": "500",
                "REQ_TIMEOUT": "30s",
                "MAX_DURATION": "60m",
            }
        )
        assert config.auction_id == 42
        assert config.user_count == 150
        assert config.effective_index_max == 100
        assert config.user_suffix == "run2"
        assert config.pace_ms == 500
        assert config.request_timeout == 30.0
        assert config.max_duration == 3600.0

    def test_empty_values_are_ignored(self):
        assert LoadConfig.from_env({"LELANG_ID": ""}).auction_id is None

    def test_bad_integer(self):
        with pytest.raises(ConfigError, match="USER_COUNT"):
            LoadConfig.from_env({"USER_COUNT": "many"})


class TestValidate:
    def test_valid(self, config):
        assert config.validate() is config

    @pytest.mark.parametrize("auction_id", [None, 0, -3])
    def test_auction_id_required(self, auction_id):
        with pytest.raises(ConfigError, match="Auction id"):
            LoadConfig(auction_id=auction_id).validate()

    def test_min_bid_above_max_bid(self):
        with pytest.raises(ConfigError, match="min_bid"):
            LoadConfig(auction_id=1, min_bid=500, max_bid=250).validate()

    @pytest.mark.parametrize("field", ["user_count", "iterations", "bid_step"])
    def test_non_positive_integers(self, field):
        with pytest.raises(ConfigError, match=field):
            LoadConfig(auction_id=1, **{field: 0}).validate()

    def test_negative_pace(self):
        with pytest.raises(ConfigError, match="pace_ms"):
            LoadConfig(auction_id=1, pace_ms=-1).validate()

    def test_inverted_index_range_is_allowed(self):
        LoadConfig(auction_id=1, index_min=10, index_max=5).validate()


class TestArgs:
    def test_flags_override_defaults(self):
        parser = build_parser(LoadConfig.from_env({"LELANG_ID": "7"}))
        args = parser.parse_args(["--users", "5", "--pace-ms", "250", "--max-duration", "2m", "--no-chart"])
        config = config_from_args(args)
        assert config.auction_id == 7
        assert config.user_count == 5
        assert config.pace_ms == 250
        assert config.max_duration == 120.0
        assert config.chart is False

    def test_describe_hides_password(self, config):
        data = describe(config)
        assert data["password"] == "***"
        assert data["index_max"] == config.user_count
