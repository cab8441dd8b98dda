"""
test/test_record.py - Tests for academy_ids.record

Run:  python test/test_record.py
"""

import os
import sys
import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional

# Ensure project root is on path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from pydantic import Field, ValidationError

from academy_ids import (
    IdentifiedRecord,
    InvalidLengthError,
    TimeOrderedIdGenerator,
    extract_datetime,
    is_uuid7,
    to_bytes,
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

class ExamSheet(IdentifiedRecord):
    exam_name: str = Field(..., min_length=1, max_length=100)
    grade: int = Field(..., ge=1, le=3)
    description: Optional[str] = None


def _sheet(**overrides) -> ExamSheet:
    fields = {"exam_name": "Grade 1 midterm", "grade": 1}
    fields.update(overrides)
    return ExamSheet(**fields)


# ---------------------------------------------------------------------------
# Tests
# ---------------------------------------------------------------------------

def test_on_create_assigns_id_and_timestamps():
    gen = TimeOrderedIdGenerator()
    sheet = _sheet()
    assert sheet.id is None
    assert sheet.id_bytes is None

    returned = sheet.on_create(gen)
    assert returned is sheet
    assert isinstance(sheet.id, uuid.UUID)
    assert is_uuid7(sheet.id)
    assert sheet.created_at == extract_datetime(sheet.id)
    assert sheet.updated_at == sheet.created_at
    print("  PASS: test_on_create_assigns_id_and_timestamps")


def test_on_create_keeps_existing_values():
    gen = TimeOrderedIdGenerator()
    created = datetime(2024, 3, 1, 9, 0, tzinfo=timezone.utc)
    sheet = _sheet(created_at=created).on_create(gen)
    first_id = sheet.id

    sheet.on_create(gen)
    assert sheet.id == first_id
    assert sheet.created_at == created
    assert sheet.updated_at == created
    print("  PASS: test_on_create_keeps_existing_values")


def test_id_is_immutable():
    gen = TimeOrderedIdGenerator()
    sheet = _sheet().on_create(gen)
    original = sheet.id

    # Same value is accepted
    sheet.id = original
    sheet.id = str(original)
    assert sheet.id == original

    try:
        sheet.id = gen.generate()
    except ValueError:
        pass
    else:
        raise AssertionError("Expected ValueError on id reassignment")
    assert sheet.id == original
    print("  PASS: test_id_is_immutable")


def test_rejects_non_v7_id():
    try:
        _sheet(id=uuid.uuid4())
    except ValidationError:
        pass
    else:
        raise AssertionError("Expected ValidationError for UUID v4")

    sheet = _sheet()
    try:
        sheet.id = uuid.uuid4()
    except ValidationError:
        pass
    else:
        raise AssertionError("Expected ValidationError on assignment")
    assert sheet.id is None
    print("  PASS: test_rejects_non_v7_id")


def test_accepts_canonical_string_id():
    value = TimeOrderedIdGenerator().generate()
    sheet = _sheet(id=str(value))
    assert sheet.id == value
    print("  PASS: test_accepts_canonical_string_id")


def test_subclass_validation_still_applies():
    try:
        _sheet(grade=4)
    except ValidationError:
        pass
    else:
        raise AssertionError("Expected ValidationError for grade 4")
    print("  PASS: test_subclass_validation_still_applies")


def test_records_sort_by_creation_order():
    gen = TimeOrderedIdGenerator()
    sheets = [_sheet(exam_name=f"Exam {i}").on_create(gen) for i in range(50)]
    by_id = sorted(sheets, key=lambda s: s.id)
    assert [s.exam_name for s in by_id] == [f"Exam {i}" for i in range(50)]
    print("  PASS: test_records_sort_by_creation_order")


def test_on_update():
    gen = TimeOrderedIdGenerator()
    sheet = _sheet().on_create(gen)
    later = sheet.created_at + timedelta(minutes=5)
    sheet.on_update(later)
    assert sheet.updated_at == later
    assert sheet.created_at < sheet.updated_at

    sheet.on_update()
    assert sheet.updated_at.tzinfo is not None
    print("  PASS: test_on_update")


def test_binary_column_roundtrip():
    gen = TimeOrderedIdGenerator()
    sheet = _sheet().on_create(gen)
    raw = sheet.id_bytes
    assert raw == to_bytes(sheet.id)
    assert len(raw) == 16

    restored = ExamSheet.from_id_bytes(raw, exam_name="Grade 1 midterm", grade=1)
    assert isinstance(restored, ExamSheet)
    assert restored.id == sheet.id

    try:
        ExamSheet.from_id_bytes(raw[:15], exam_name="x", grade=1)
    except InvalidLengthError:
        pass
    else:
        raise AssertionError("Expected InvalidLengthError")
    print("  PASS: test_binary_column_roundtrip")


def test_json_roundtrip():
    gen = TimeOrderedIdGenerator()
    sheet = _sheet(description="covers units 1-3").on_create(gen)
    restored = ExamSheet.model_validate_json(sheet.model_dump_json())
    assert restored == sheet
    print("  PASS: test_json_roundtrip")


# ---------------------------------------------------------------------------
# Runner
# ---------------------------------------------------------------------------

def run_all():
    print("=" * 60)
    print("academy_ids.record Test Suite")
    print("=" * 60)
    test_on_create_assigns_id_and_timestamps()
    test_on_create_keeps_existing_values()
    test_id_is_immutable()
    test_rejects_non_v7_id()
    test_accepts_canonical_string_id()
    test_subclass_validation_still_applies()
    test_records_sort_by_creation_order()
    test_on_update()
    test_binary_column_roundtrip()
    test_json_roundtrip()
    print("\nALL TESTS PASSED")


if __name__ == "__main__":
    run_all()
