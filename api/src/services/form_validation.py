"""
Report Field Validation

Authoritative required-field check run when a report is submitted.
Drafts may be saved incomplete; only submission is blocked.

The per-field error clearing done while the user types lives in
ReportFormSession and is only a display hint. It never replaces this pass.
"""

from typing import Sequence

from src.models.contracts.reports import CLIENT_SCHEMA, ClientEntry, RecordSchema

ValidationErrorMap = dict[str, list[str]]


def is_blank(value: object) -> bool:
    """A value is blank when it is None or a string that is empty after trimming."""
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    return False


def missing_required_fields(record: ClientEntry, schema: RecordSchema = CLIENT_SCHEMA) -> list[str]:
    """Return the required wire keys of a record that are blank, in schema order."""
    return [key for key in schema.required_keys if is_blank(record.value_of(key))]


def validate_records(
    records: Sequence[ClientEntry],
    schema: RecordSchema = CLIENT_SCHEMA,
) -> ValidationErrorMap:
    """
    Validate every record against the schema's required fields.

    Records with nothing missing are left out of the result, so an empty
    dict means the whole list is valid.

    Args:
        records: Client entries in display order
        schema: Record schema declaring required fields

    Returns:
        Mapping of record id -> missing required wire keys
    """
    errors: ValidationErrorMap = {}
    for record in records:
        missing = missing_required_fields(record, schema)
        if missing:
            errors[record.id] = missing
    return errors


def first_invalid_record(records: Sequence[ClientEntry], errors: ValidationErrorMap) -> str | None:
    """Return the id of the first record (list order) that has errors."""
    for record in records:
        if record.id in errors:
            return record.id
    return None


def has_required_info(record: ClientEntry, schema: RecordSchema = CLIENT_SCHEMA) -> bool:
    return not missing_required_fields(record, schema)
