"""
Random payload generation for the data endpoints.
"""

import random
import string
import time
from datetime import datetime, timezone
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

from shared.errors import ValidationError

SINGLE_VALUE_UPPER_BOUND = 1000
BULK_VALUE_UPPER_BOUND = 10000
RANDOM_TEXT_LENGTH = 20
RANDOM_TEXT_ALPHABET = string.ascii_lowercase + string.ascii_uppercase + string.digits + " "
DEFAULT_BULK_SIZE = 100

INVALID_SIZE_MESSAGE = "Invalid 'size' parameter. Must be an integer."
NEGATIVE_SIZE_MESSAGE = "Invalid 'size' parameter. Must be a non-negative integer."

# Signed 64-bit bounds for the size parameter
SIZE_MIN = -(2 ** 63)
SIZE_MAX = 2 ** 63 - 1
SIZE_MAX_DIGITS = len(str(SIZE_MAX))
SIZE_LOG_PREFIX = 32


class SingleRecord(BaseModel):
    """Payload served by /data."""

    model_config = ConfigDict(frozen=True)

    timestamp: datetime = Field(..., description="Generation time")
    random_value: int = Field(..., ge=0, lt=SINGLE_VALUE_UPPER_BOUND)


class BulkRecord(BaseModel):
    """One item of the /data-massive payload."""

    model_config = ConfigDict(frozen=True)

    timestamp: datetime = Field(..., description="Generation time")
    random_number_1: int = Field(..., ge=0, lt=BULK_VALUE_UPPER_BOUND)
    random_number_2: int = Field(..., ge=0, lt=BULK_VALUE_UPPER_BOUND)
    random_number_3: int = Field(..., ge=0, lt=BULK_VALUE_UPPER_BOUND)
    random_number_4: int = Field(..., ge=0, lt=BULK_VALUE_UPPER_BOUND)
    random_text: str = Field(..., min_length=RANDOM_TEXT_LENGTH, max_length=RANDOM_TEXT_LENGTH)


_bulk_adapter = TypeAdapter(List[BulkRecord])


def new_generator() -> random.Random:
    """Return a generator seeded from the wall clock in nanoseconds.

    Not suitable for anything security related. Two calls within the same
    clock tick produce the same sequence.
    """
    return random.Random(time.time_ns())


def _now() -> datetime:
    return datetime.now(timezone.utc)


def generate_random_text(length: int, rng: random.Random) -> str:
    """Draw ``length`` characters from the record alphabet."""
    return "".join(rng.choice(RANDOM_TEXT_ALPHABET) for _ in range(length))


def generate_single_record(rng: Optional[random.Random] = None) -> SingleRecord:
    """Produce one record for /data."""
    rng = rng or new_generator()
    return SingleRecord(
        timestamp=_now(),
        random_value=rng.randrange(SINGLE_VALUE_UPPER_BOUND),
    )


def generate_bulk_records(count: int, rng: Optional[random.Random] = None) -> List[BulkRecord]:
    """Produce ``count`` independently sampled records for /data-massive."""
    if count < 0:
        raise ValidationError(NEGATIVE_SIZE_MESSAGE, details={"size": count})

    rng = rng or new_generator()
    records = []
    for _ in range(count):
        records.append(BulkRecord(
            timestamp=_now(),
            random_number_1=rng.randrange(BULK_VALUE_UPPER_BOUND),
            random_number_2=rng.randrange(BULK_VALUE_UPPER_BOUND),
            random_number_3=rng.randrange(BULK_VALUE_UPPER_BOUND),
            random_number_4=rng.randrange(BULK_VALUE_UPPER_BOUND),
            random_text=generate_random_text(RANDOM_TEXT_LENGTH, rng),
        ))
    return records


def parse_size(raw: Optional[str], default: int = DEFAULT_BULK_SIZE) -> int:
    """Parse the ``size`` query parameter.

    An absent or empty value selects ``default``. Accepts an optional sign
    followed by ASCII digits, nothing else, within the signed 64-bit range.
    """
    if raw is None or raw == "":
        return default

    digits = raw[1:] if raw[:1] in ("+", "-") else raw
    if not digits or not (digits.isascii() and digits.isdigit()):
        raise ValidationError(INVALID_SIZE_MESSAGE, details={"size": raw[:SIZE_LOG_PREFIX]})

    # Length check first; int() refuses very long digit strings
    if len(digits.lstrip("0")) > SIZE_MAX_DIGITS:
        raise ValidationError(INVALID_SIZE_MESSAGE, details={"size": raw[:SIZE_LOG_PREFIX]})

    magnitude = int(digits.lstrip("0") or "0")
    size = -magnitude if raw[0] == "-" else magnitude
    if not SIZE_MIN <= size <= SIZE_MAX:
        raise ValidationError(INVALID_SIZE_MESSAGE, details={"size": raw[:SIZE_LOG_PREFIX]})
    if size < 0:
        raise ValidationError(NEGATIVE_SIZE_MESSAGE, details={"size": size})
    return size


def build_bulk_payload(count: int) -> bytes:
    """Generate and serialize ``count`` records in one call.

    CPU bound for large counts; callers on an event loop run it in an executor.
    """
    return encode_bulk_records(generate_bulk_records(count))


def encode_single_record(record: SingleRecord) -> bytes:
    return record.model_dump_json().encode("utf-8")


def encode_bulk_records(records: List[BulkRecord]) -> bytes:
    """Serialize the full bulk payload to a JSON array."""
    return _bulk_adapter.dump_json(records)
