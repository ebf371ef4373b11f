"""Per-run settings for a reconciliation."""

from __future__ import annotations

from dataclasses import dataclass

from .env import env_float, env_int
from .errors import ConfigurationError

DEFAULT_MAX_CONCURRENCY = 8
DEFAULT_CALL_TIMEOUT_SECONDS = 30.0


@dataclass(frozen=True, slots=True)
class RunConfig:
    """Immutable settings handed to the reconciler at construction."""

    organization: str
    dry_run: bool = False
    verbose: bool = False
    max_concurrency: int = DEFAULT_MAX_CONCURRENCY
    call_timeout_seconds: float = DEFAULT_CALL_TIMEOUT_SECONDS

    def __post_init__(self) -> None:
        if self.max_concurrency < 1:
            raise ConfigurationError(
                f"max_concurrency must be at least 1, got {self.max_concurrency}"
            )
        if self.call_timeout_seconds <= 0:
            raise ConfigurationError(
                f"call timeout must be positive, got {self.call_timeout_seconds}"
            )


def get_run_config(
    *,
    organization: str,
    dry_run: bool = False,
    verbose: bool = False,
    max_concurrency: int | None = None,
    call_timeout_seconds: float | None = None,
) -> RunConfig:
    """Build a ``RunConfig``; explicit arguments win over environment overrides."""

    return RunConfig(
        organization=organization,
        dry_run=dry_run,
        verbose=verbose,
        max_concurrency=(
            max_concurrency
            if max_concurrency is not None
            else env_int("PROPSYNC_MAX_CONCURRENCY", DEFAULT_MAX_CONCURRENCY)
        ),
        call_timeout_seconds=(
            call_timeout_seconds
            if call_timeout_seconds is not None
            else env_float("PROPSYNC_CALL_TIMEOUT", DEFAULT_CALL_TIMEOUT_SECONDS)
        ),
    )
