from __future__ import annotations

import pytest
from pydantic import ValidationError

from logstreamio.core.settings import CoreSettings, Settings


def test_defaults() -> None:
    settings = Settings()
    assert settings.core.internal_logging_enabled is False
    assert settings.core.enable_metrics is False
    assert settings.core.call_timeout_seconds is None
    assert settings.core.oversized_event_policy == "split"


def test_env_overrides_nested_core(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("LOGSTREAMIO_CORE__ENABLE_METRICS", "true")
    monkeypatch.setenv("LOGSTREAMIO_CORE__CALL_TIMEOUT_SECONDS", "2.5")
    monkeypatch.setenv("LOGSTREAMIO_CORE__OVERSIZED_EVENT_POLICY", "truncate")
    core = Settings().core
    assert core.enable_metrics is True
    assert core.call_timeout_seconds == 2.5
    assert core.oversized_event_policy == "truncate"


def test_invalid_values_are_rejected() -> None:
    with pytest.raises(ValidationError):
        CoreSettings(call_timeout_seconds=0)
    with pytest.raises(ValidationError):
        CoreSettings(oversized_event_policy="drop")  # type: ignore[arg-type]
    with pytest.raises(ValidationError):
        CoreSettings(diagnostics_rate_limit_seconds=-1)


def test_to_dict_omits_unset_optionals() -> None:
    data = Settings().to_dict()
    assert "call_timeout_seconds" not in data["core"]  # type: ignore[operator]
    assert data["core"]["oversized_event_policy"] == "split"  # type: ignore[index]
