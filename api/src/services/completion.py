"""
Report Completion Tracking

Derives the completion percentage shown above the report form.

total     = counted header fields + required fields per client * clients
completed = populated counted header fields + populated required client fields

Optional client fields never count. A number is populated when non-zero,
a string when non-blank.
"""

import math
from typing import Sequence

from src.models.contracts.reports import (
    CLIENT_SCHEMA,
    HEADER_COUNTED_FIELDS,
    ClientEntry,
    RecordCompletion,
    RecordSchema,
    ReportHeader,
    resolve_attribute,
)
from src.services.form_validation import has_required_info, is_blank


def _is_populated(value: object) -> bool:
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return value != 0
    return not is_blank(value)


def _percentage(completed: int, total: int) -> int:
    if total <= 0:
        return 0
    # Round half up, not Python's banker's rounding
    value = math.floor(100 * completed / total + 0.5)
    return max(0, min(100, value))


def count_header_fields(header: ReportHeader) -> int:
    """Count populated header fields that contribute to completion."""
    return sum(
        1 for key in HEADER_COUNTED_FIELDS
        if _is_populated(getattr(header, resolve_attribute(ReportHeader, key)))
    )


def compute_record_completion(
    record: ClientEntry,
    schema: RecordSchema = CLIENT_SCHEMA,
) -> RecordCompletion:
    """Completion of one client entry over its required fields only."""
    required = schema.required_keys
    completed = sum(1 for key in required if _is_populated(record.value_of(key)))
    return RecordCompletion(
        completed=completed,
        total=len(required),
        percentage=_percentage(completed, len(required)),
        complete=has_required_info(record, schema),
    )


def compute_completion(
    header: ReportHeader,
    records: Sequence[ClientEntry],
    schema: RecordSchema = CLIENT_SCHEMA,
) -> int:
    """
    Compute overall report completion.

    Args:
        header: Report header values
        records: Client entries
        schema: Client record schema

    Returns:
        Integer percentage in [0, 100]; 0 when there is nothing to count
    """
    total = len(HEADER_COUNTED_FIELDS) + len(schema.required_keys) * len(records)
    completed = count_header_fields(header)
    for record in records:
        completed += compute_record_completion(record, schema).completed
    return _percentage(completed, total)
