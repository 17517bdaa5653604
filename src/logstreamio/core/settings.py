"""
Configuration models for logstreamio using Pydantic v2 Settings.

Quota constants (batch ceilings, call rates) live in ``limits`` and are not
configurable; settings only cover behaviour around them.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class CoreSettings(BaseModel):
    """Core adapter settings."""

    internal_logging_enabled: bool = Field(
        default=False,
        description="Emit DEBUG/WARN diagnostics for internal errors",
    )
    diagnostics_rate_limit_seconds: float = Field(
        default=1.0,
        ge=0.0,
        description="Minimum interval between diagnostics sharing a rate-limit key",
    )
    enable_metrics: bool = Field(
        default=False,
        description="Enable Prometheus-compatible metrics",
    )
    call_timeout_seconds: float | None = Field(
        default=None,
        gt=0.0,
        description=(
            "Deadline applied to every remote call; expiry is treated as a "
            "transport error"
        ),
    )
    oversized_event_policy: Literal["split", "truncate", "reject"] = Field(
        default="split",
        description="How to handle a single line larger than the batch ceiling",
    )


class Settings(BaseSettings):
    """Top-level configuration model."""

    core: CoreSettings = Field(default_factory=CoreSettings)

    model_config = SettingsConfigDict(
        env_prefix="LOGSTREAMIO_",
        env_nested_delimiter="__",
        extra="ignore",
        case_sensitive=False,
    )

    def to_dict(self) -> dict[str, object]:
        from typing import cast

        return cast(
            dict[str, object],
            self.model_dump(by_alias=True, exclude_none=True),
        )


__all__ = ["CoreSettings", "Settings"]
