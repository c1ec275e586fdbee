from pathlib import Path

import pytest

from estreui.environment import (
    EnvironmentError,
    EstreUIConfig,
    get_env_config,
    is_debug_enabled,
    reset_env_config,
)


def test_defaults():
    config = EstreUIConfig.from_environ({})
    assert config.ESTREUI_DEBUG is False
    assert config.ESTREUI_LOG_LEVEL == "INFO"
    assert config.ESTREUI_CORE_PATH is None
    assert config.ESTREUI_NPM == "npm"
    assert config.ESTREUI_IGNORE_FILE == ".estreuiignore"
    assert config.ESTREUI_DEV_PORT == 8080


def test_values_from_environ(tmp_path):
    config = EstreUIConfig.from_environ(
        {
            "ESTREUI_DEBUG": "yes",
            "ESTREUI_LOG_LEVEL": "warning",
            "ESTREUI_CORE_PATH": str(tmp_path),
            "ESTREUI_NPM": "pnpm",
            "ESTREUI_DEV_PORT": "3000",
        }
    )
    assert config.ESTREUI_DEBUG is True
    assert config.ESTREUI_LOG_LEVEL == "WARNING"
    assert config.ESTREUI_CORE_PATH == Path(tmp_path)
    assert config.ESTREUI_NPM == "pnpm"
    assert config.ESTREUI_DEV_PORT == 3000
    assert config.log_level == "DEBUG"


@pytest.mark.parametrize(
    "environ",
    [
        {"ESTREUI_LOG_LEVEL": "chatty"},
        {"ESTREUI_DEV_PORT": "70000"},
        {"ESTREUI_DEV_PORT": "not-a-port"},
    ],
)
def test_invalid_values(environ):
    with pytest.raises(EnvironmentError):
        EstreUIConfig.from_environ(environ)


def test_singleton_reads_os_environ(monkeypatch):
    monkeypatch.setenv("ESTREUI_DEBUG", "1")
    reset_env_config()
    assert get_env_config() is get_env_config()
    assert is_debug_enabled() is True

    monkeypatch.setenv("ESTREUI_DEBUG", "0")
    reset_env_config()
    assert is_debug_enabled() is False
