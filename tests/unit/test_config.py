from focuslens.config import Settings


def test_production_trend_config_uses_configured_values():
    config = Settings(environment="production", TREND_MAX_CONCURRENCY=8).get_trend_config()

    assert config == {"max_concurrency": 8, "day_timeout": 30.0, "rolling_window": 7}


def test_development_trend_config_caps_concurrency():
    config = Settings(environment="development", TREND_MAX_CONCURRENCY=8).get_trend_config()

    assert config["max_concurrency"] == 2
