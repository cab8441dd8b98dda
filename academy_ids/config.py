"""
academy_ids/config.py - Generator configuration

Settings are read from environment variables prefixed ``ACADEMY_IDS_``
(or passed explicitly).  Only behaviour that an operator may need to
change at deploy time lives here; everything structural about the
identifier layout is fixed in uuid7.py.

    ACADEMY_IDS_CLOCK_REGRESSION   hold | wait   (default: hold)
    ACADEMY_IDS_MAX_WAIT_MS        0..60000      (default: 1000)
"""

from enum import Enum

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ClockRegression(str, Enum):
    """What the generator does when the wall clock moves backward."""
    HOLD = "hold"   # keep the last-used millisecond, continue the counter
    WAIT = "wait"   # spin until the clock catches up (bounded by max_wait_ms)


class IdSettings(BaseSettings):
    """Runtime settings for TimeOrderedIdGenerator."""

    model_config = SettingsConfigDict(
        env_prefix="ACADEMY_IDS_",
        case_sensitive=False,
        extra="ignore",
    )

    clock_regression: ClockRegression = Field(
        default=ClockRegression.HOLD,
        description="Strategy applied when the clock reads earlier than "
                    "the last-used millisecond.",
    )
    max_wait_ms: int = Field(
        default=1000,
        ge=0,
        le=60_000,
        description="Upper bound on the WAIT strategy before it falls "
                    "back to HOLD for that call.",
    )
