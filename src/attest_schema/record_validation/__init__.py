"""Record validation exports."""

from .document_checker import build_document_validator, build_format_checker, check_with_document
from .domain_formats import (
    is_valid_address,
    is_valid_bytes,
    is_valid_datetime,
    is_valid_symbol,
    is_valid_timestamp,
    parse_amount,
)
from .record_codec import (
    ZERO_ADDRESS,
    EncodedRecord,
    RecordCodecError,
    RecordRejectedError,
    decode_record,
    encode_record,
    generate_defaults,
)
from .record_validator import validate_record
from .validation_outcomes import ValidationError, ValidationErrorKind

__all__ = [
    "EncodedRecord",
    "RecordCodecError",
    "RecordRejectedError",
    "ValidationError",
    "ValidationErrorKind",
    "ZERO_ADDRESS",
    "build_document_validator",
    "build_format_checker",
    "check_with_document",
    "decode_record",
    "encode_record",
    "generate_defaults",
    "is_valid_address",
    "is_valid_bytes",
    "is_valid_datetime",
    "is_valid_symbol",
    "is_valid_timestamp",
    "parse_amount",
    "validate_record",
]
