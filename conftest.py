"""
Root conftest — isolate HIVEN_* environment variables so that settings
tests are not affected by a real token or config path in the developer's
or CI environment.
"""
import pytest

_HIVEN_ENV_VARS = [
    "HIVEN_TOKEN",
    "HIVEN_CONFIG",
]


@pytest.fixture(autouse=True)
def _clear_hiven_env(monkeypatch):
    """Remove HIVEN_* env vars for every test so Settings() behaves as if
    nothing is configured unless the test explicitly provides it.
    Also disables .env file loading so a local .env does not leak a real
    token into tests."""
    for var in _HIVEN_ENV_VARS:
        monkeypatch.delenv(var, raising=False)

    import hiven.config.settings as settings_module
    from pydantic_settings import SettingsConfigDict
    patched_config = SettingsConfigDict(
        env_file=None,
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
        case_sensitive=False,
        populate_by_name=True,
    )
    monkeypatch.setattr(settings_module.Settings, "model_config", patched_config)
    monkeypatch.setattr(settings_module, "_singleton", None)
