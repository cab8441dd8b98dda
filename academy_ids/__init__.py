"""
academy_ids - Time-ordered identifiers for the academy backend.

UUID v7 generation with a per-millisecond monotonic counter, the
conversions entities need (text, 16-byte binary, embedded timestamp),
and an identity base model for entity-creation hooks.
"""

__version__ = "0.1.0"

from .config import ClockRegression, IdSettings
from .uuid7 import (
    InvalidLengthError,
    TimeOrderedIdGenerator,
    UUID_BYTE_LENGTH,
    extract_datetime,
    extract_timestamp,
    from_bytes,
    is_uuid7,
    parse,
    to_bytes,
    to_canonical_string,
)
from .record import IdentifiedRecord
