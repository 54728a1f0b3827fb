import pytest
from pydantic import ValidationError

from salesdash.config import DEFAULT_DATA_PATH, DashboardSettings, load_settings
from salesdash.scales import ScalesConfig


def test_defaults():
    settings = load_settings({})
    assert settings.data_path == DEFAULT_DATA_PATH
    assert settings.tick_interval_s == 0.9
    assert settings.modal_scale == 1.5
    assert settings.log_level == "INFO"
    assert settings.trend.to_scales_config() == ScalesConfig(width=670, height=270)


def test_environment_overrides():
    settings = load_settings({
        "SALESDASH_DATA_PATH": "/tmp/sales.csv",
        "SALESDASH_TICK_INTERVAL": "0.5",
        "SALESDASH_MODAL_SCALE": "2",
        "SALESDASH_LOG_LEVEL": "debug",
    })
    assert str(settings.data_path) == "/tmp/sales.csv"
    assert settings.tick_interval_s == 0.5
    assert settings.modal_scale == 2.0
    assert settings.log_level == "DEBUG"


@pytest.mark.parametrize(
    "env",
    [
        {"SALESDASH_TICK_INTERVAL": "0"},
        {"SALESDASH_MODAL_SCALE": "-1"},
        {"SALESDASH_LOG_LEVEL": "LOUD"},
    ],
)
def test_invalid_settings_are_rejected(env):
    with pytest.raises(ValidationError):
        load_settings(env)


def test_chart_sizes_must_be_positive():
    with pytest.raises(ValidationError):
        DashboardSettings(bar={"width": 0, "height": 100})
