"""
academy_ids/uuid7.py - Time-ordered identifier generation (UUID v7)

Implements RFC 9562 UUID v7 with a monotonic counter in rand_a:

    48-bit unix_ts_ms | 4-bit version (7) | 12-bit counter
    | 2-bit variant (10) | 62-bit random

Within one millisecond the counter increments, so identifiers from one
generator are strictly increasing even under rapid calls.  A new
millisecond reseeds the counter from 11 random bits (top bit clear),
which leaves at least 2048 increments before exhaustion.  On exhaustion
the generator spins into the next millisecond.

Identifiers are plain ``uuid.UUID`` values: hashable, ordered by their
integer value, and rendered in the canonical 8-4-4-4-12 form.
"""

from __future__ import annotations

import logging
import secrets
import threading
import time
import uuid
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional, Union

from .config import ClockRegression, IdSettings

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Layout constants
# ---------------------------------------------------------------------------

UUID_BYTE_LENGTH = 16
VERSION = 0x7
VARIANT = 0b10

TIMESTAMP_BITS = 48
COUNTER_BITS = 12
RANDOM_BITS = 62

TIMESTAMP_MASK = (1 << TIMESTAMP_BITS) - 1
MAX_COUNTER = (1 << COUNTER_BITS) - 1
# Seed leaves the counter's top bit clear: >= 2048 increments per millisecond
COUNTER_SEED_BITS = COUNTER_BITS - 1

_UNIX_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


class InvalidLengthError(ValueError):
    """Raised when a byte sequence is not exactly 16 bytes long."""

    def __init__(self, length: int) -> None:
        self.length = length
        super().__init__(
            f"UUID byte form must be exactly {UUID_BYTE_LENGTH} bytes, "
            f"got {length}"
        )


def _system_clock_ms() -> int:
    return time.time_ns() // 1_000_000


# ---------------------------------------------------------------------------
# Generator
# ---------------------------------------------------------------------------

class TimeOrderedIdGenerator:
    """Thread-safe, monotonic UUID v7 generator.

    One instance is one logical sequence.  Share the instance between
    every caller that needs ordering guarantees relative to the others;
    the library never creates a global one.

    Args:
        clock:            Returns the current Unix time in milliseconds.
        random_bits:      ``f(k)`` returning k uniformly random bits.
        clock_regression: Strategy when the clock moves backward.
        max_wait_ms:      Bound on the WAIT strategy.
    """

    def __init__(
        self,
        *,
        clock: Optional[Callable[[], int]] = None,
        random_bits: Optional[Callable[[int], int]] = None,
        clock_regression: ClockRegression = ClockRegression.HOLD,
        max_wait_ms: int = 1000,
    ) -> None:
        if max_wait_ms < 0:
            raise ValueError(f"max_wait_ms must be >= 0, got {max_wait_ms}")
        self._clock = clock or _system_clock_ms
        self._random_bits = random_bits or secrets.randbits
        self._clock_regression = ClockRegression(clock_regression)
        self._max_wait_ms = max_wait_ms

        self._lock = threading.Lock()
        self._last_ms: Optional[int] = None
        self._counter = 0
        self._regressed = False

    @classmethod
    def from_settings(
        cls,
        settings: Optional[IdSettings] = None,
        **kwargs,
    ) -> "TimeOrderedIdGenerator":
        """Build a generator from IdSettings (environment when omitted)."""
        settings = settings or IdSettings()
        return cls(
            clock_regression=settings.clock_regression,
            max_wait_ms=settings.max_wait_ms,
            **kwargs,
        )

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    @property
    def clock_regression(self) -> ClockRegression:
        return self._clock_regression

    @property
    def last_timestamp(self) -> Optional[int]:
        """Millisecond embedded in the most recent identifier, or None."""
        return self._last_ms

    def generate(self) -> uuid.UUID:
        """Return a new identifier greater than every earlier one."""
        with self._lock:
            now = self._read_clock()
            last = self._last_ms

            if last is not None and now == last:
                counter = self._counter + 1
                if counter > MAX_COUNTER:
                    logger.debug(
                        "UUIDv7 counter exhausted at %d ms; advancing", last
                    )
                    now = self._next_millisecond(last)
                    counter = self._seed_counter()
            else:
                counter = self._seed_counter()

            self._last_ms = now
            self._counter = counter
            rand_b = self._random_bits(RANDOM_BITS)

        return _assemble(now, counter, rand_b)

    def generate_string(self) -> str:
        """Return a new identifier in canonical text form."""
        return to_canonical_string(self.generate())

    # ------------------------------------------------------------------
    # Internals (caller holds self._lock)
    # ------------------------------------------------------------------

    def _seed_counter(self) -> int:
        return self._random_bits(COUNTER_SEED_BITS)

    def _read_clock(self) -> int:
        """Current millisecond, never lower than the last-used one."""
        now = self._clock()
        last = self._last_ms
        if last is None or now >= last:
            if self._regressed and last is not None and now > last:
                logger.info("Clock caught up at %d ms", now)
                self._regressed = False
            return now

        if self._clock_regression == ClockRegression.WAIT:
            caught_up = self._wait_until(last)
            if caught_up is not None:
                return caught_up
            logger.warning(
                "Clock did not reach %d ms within %d ms; "
                "holding last timestamp",
                last, self._max_wait_ms,
            )
            return last

        if not self._regressed:
            logger.warning(
                "Clock moved backward by %d ms; holding last timestamp %d",
                last - now, last,
            )
            self._regressed = True
        return last

    def _wait_until(self, target_ms: int) -> Optional[int]:
        """Spin until the clock reaches target_ms; None on timeout."""
        deadline = time.monotonic() + self._max_wait_ms / 1000.0
        while True:
            now = self._clock()
            if now >= target_ms:
                return now
            if time.monotonic() >= deadline:
                return None

    def _next_millisecond(self, last_ms: int) -> int:
        """First millisecond strictly after last_ms."""
        now = self._clock()
        if now < last_ms:
            # Held timestamp with the clock still behind: step forward logically.
            return last_ms + 1
        while now <= last_ms:
            now = self._clock()
        return now


def _assemble(timestamp_ms: int, counter: int, rand_b: int) -> uuid.UUID:
    value = (timestamp_ms & TIMESTAMP_MASK) << 80
    value |= VERSION << 76
    value |= (counter & MAX_COUNTER) << 64
    value |= VARIANT << 62
    value |= rand_b & ((1 << RANDOM_BITS) - 1)
    return uuid.UUID(int=value)


# ---------------------------------------------------------------------------
# Conversion helpers
# ---------------------------------------------------------------------------

def _require_uuid(value: object) -> uuid.UUID:
    if not isinstance(value, uuid.UUID):
        raise TypeError(f"Expected uuid.UUID, got {type(value).__name__}")
    return value


def to_canonical_string(value: uuid.UUID) -> str:
    """Render as 36-character lowercase hyphenated hex."""
    return str(_require_uuid(value))


def parse(text: str) -> uuid.UUID:
    """Parse textual form into an identifier. Raises ValueError if malformed."""
    if not isinstance(text, str):
        raise TypeError(f"Expected str, got {type(text).__name__}")
    return uuid.UUID(text.strip())


def to_bytes(value: uuid.UUID) -> bytes:
    """16-byte big-endian form, suitable for a BINARY(16) column."""
    return _require_uuid(value).bytes


def from_bytes(data: Union[bytes, bytearray, memoryview]) -> uuid.UUID:
    """Inverse of to_bytes. Raises InvalidLengthError unless len == 16."""
    if not isinstance(data, (bytes, bytearray, memoryview)):
        raise TypeError(f"Expected bytes-like, got {type(data).__name__}")
    raw = bytes(data)
    if len(raw) != UUID_BYTE_LENGTH:
        raise InvalidLengthError(len(raw))
    return uuid.UUID(bytes=raw)


def extract_timestamp(value: uuid.UUID) -> int:
    """Unix milliseconds stored in the top 48 bits."""
    return _require_uuid(value).int >> 80


def extract_datetime(value: uuid.UUID) -> datetime:
    """Embedded timestamp as an aware UTC datetime."""
    return _UNIX_EPOCH + timedelta(milliseconds=extract_timestamp(value))


def is_uuid7(value: uuid.UUID) -> bool:
    """True when the version nibble is 7 and the variant bits are 10."""
    n = _require_uuid(value).int
    return (n >> 76) & 0xF == VERSION and (n >> 62) & 0b11 == VARIANT
