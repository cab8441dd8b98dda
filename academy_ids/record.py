"""
academy_ids/record.py - Entity identity base model

Entities (students, admins, exam sheets, submissions, ...) extend
IdentifiedRecord.  It carries the three columns every entity shares
and the two lifecycle hooks that fill them:

    on_create(generator)   id (UUID v7), created_at, updated_at
    on_update()            updated_at

The generator is passed in by the caller; this module holds no
generator of its own.  Persistence is the caller's concern: ``id_bytes``
and ``from_id_bytes`` bridge to a BINARY(16) column.
"""

# `from __future__ import annotations` is omitted: pydantic resolves the
# field annotations at class creation.

from datetime import datetime, timezone
from typing import Any, Optional, Union
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .uuid7 import (
    TimeOrderedIdGenerator,
    extract_datetime,
    from_bytes,
    is_uuid7,
    to_bytes,
)


class IdentifiedRecord(BaseModel):
    """Base model for entities keyed by a time-ordered identifier.

    The id is assigned at most once.  Reassigning a different value to a
    record that already has one raises ValueError.
    """

    model_config = ConfigDict(validate_assignment=True)

    id: Optional[UUID] = Field(
        default=None,
        description="UUID v7 primary key. Assigned by on_create() when absent.",
    )
    created_at: Optional[datetime] = Field(
        default=None,
        description="Creation time. Defaults to the timestamp embedded in id.",
    )
    updated_at: Optional[datetime] = Field(
        default=None,
        description="Last modification time.",
    )

    @field_validator("id")
    @classmethod
    def validate_id_version(cls, v: Optional[UUID]) -> Optional[UUID]:
        if v is not None and not is_uuid7(v):
            raise ValueError(f"id must be a UUID v7, got version {v.version}")
        return v

    def __setattr__(self, name: str, value: Any) -> None:
        if name == "id":
            current = self.__dict__.get("id")
            if current is not None and str(value) != str(current):
                raise ValueError(
                    f"id is immutable once assigned (current {current})"
                )
        super().__setattr__(name, value)

    # ------------------------------------------------------------------
    # Lifecycle hooks
    # ------------------------------------------------------------------

    def on_create(self, generator: TimeOrderedIdGenerator) -> "IdentifiedRecord":
        """Fill id and timestamps that are still unset. Returns self."""
        if self.id is None:
            self.id = generator.generate()
        if self.created_at is None:
            self.created_at = extract_datetime(self.id)
        if self.updated_at is None:
            self.updated_at = self.created_at
        return self

    def on_update(self, now: Optional[datetime] = None) -> "IdentifiedRecord":
        """Refresh updated_at. Returns self."""
        self.updated_at = now or datetime.now(timezone.utc)
        return self

    # ------------------------------------------------------------------
    # Binary column bridge
    # ------------------------------------------------------------------

    @property
    def id_bytes(self) -> Optional[bytes]:
        return to_bytes(self.id) if self.id is not None else None

    @classmethod
    def from_id_bytes(
        cls,
        data: Union[bytes, bytearray, memoryview],
        **fields: Any,
    ) -> "IdentifiedRecord":
        """Rebuild a record whose id was stored in 16-byte form."""
        return cls(id=from_bytes(data), **fields)
