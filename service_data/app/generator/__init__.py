"""
Random payload generator package.

Builds the pseudo-random records served by /data and /data-massive and
parses the bulk ``size`` parameter. Nothing here performs IO.
"""

from .random_payload import (
    BulkRecord,
    build_bulk_payload,
    DEFAULT_BULK_SIZE,
    SingleRecord,
    encode_bulk_records,
    encode_single_record,
    generate_bulk_records,
    generate_single_record,
    parse_size,
)

__all__ = [
    "BulkRecord",
    "build_bulk_payload",
    "DEFAULT_BULK_SIZE",
    "SingleRecord",
    "encode_bulk_records",
    "encode_single_record",
    "generate_bulk_records",
    "generate_single_record",
    "parse_size",
]
