from __future__ import annotations

import logging

import pytest

from propsync.config import (
    ConfigurationError,
    MissingConfigurationError,
    env_float,
    env_int,
    optional_env_var,
    require_env_var,
    require_env_vars,
)


def test_require_env_vars_returns_values(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("EXAMPLE_VAR", "value")

    result = require_env_vars(["EXAMPLE_VAR"])

    assert result["EXAMPLE_VAR"] == "value"


def test_require_env_vars_lists_every_missing_name(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("MISSING_A", raising=False)
    monkeypatch.setenv("MISSING_B", "   ")

    with pytest.raises(MissingConfigurationError) as exc:
        require_env_vars(["MISSING_B", "MISSING_A"])

    assert "MISSING_A, MISSING_B" in str(exc.value)


def test_require_env_var_handles_blank_values(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("EXAMPLE_VAR", "   ")

    with pytest.raises(MissingConfigurationError):
        require_env_var("EXAMPLE_VAR")


def test_optional_env_var_warns_on_fallback(
    monkeypatch: pytest.MonkeyPatch, caplog: pytest.LogCaptureFixture
) -> None:
    monkeypatch.delenv("EXAMPLE_VAR", raising=False)

    with caplog.at_level(logging.WARNING, logger="propsync"):
        value = optional_env_var("EXAMPLE_VAR", "fallback", warn=True)

    assert value == "fallback"
    assert "EXAMPLE_VAR is not set, using default 'fallback'" in caplog.text


def test_optional_env_var_strips_value(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("EXAMPLE_VAR", "  acme  ")

    assert optional_env_var("EXAMPLE_VAR", "fallback") == "acme"


def test_numeric_env_vars(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("EXAMPLE_INT", "12")
    monkeypatch.setenv("EXAMPLE_FLOAT", "2.5")
    monkeypatch.delenv("EXAMPLE_UNSET", raising=False)

    assert env_int("EXAMPLE_INT", 1) == 12
    assert env_float("EXAMPLE_FLOAT", 1.0) == 2.5
    assert env_int("EXAMPLE_UNSET", 7) == 7


def test_invalid_numeric_env_var_is_configuration_error(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("EXAMPLE_INT", "many")

    with pytest.raises(ConfigurationError, match="EXAMPLE_INT must be an integer"):
        env_int("EXAMPLE_INT", 1)
