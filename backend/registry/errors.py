"""Error taxonomy for schedule and TLD mutation failures.

Every error carries structured attributes alongside its message so callers
(API, CLI) can report the offending values and the violated constraint.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime
from typing import Any


class TldConfigError(ValueError):
    """Base class for all schedule and TLD validation failures."""

    kind: str = "TldConfigError"

    def __init__(self, message: str, **detail: Any):
        super().__init__(message)
        self.message = message
        self.detail = detail

    def to_dict(self) -> dict[str, Any]:
        return {"error": self.kind, "detail": self.message}


# =============================================================================
# Schedule errors
# =============================================================================


class DuplicateTimestamp(TldConfigError):
    kind = "DuplicateTimestamp"

    def __init__(self, effective_at: datetime):
        super().__init__(
            f"Duplicate transition time {effective_at.isoformat()}",
            effective_at=effective_at,
        )
        self.effective_at = effective_at


class OutOfOrderTransition(TldConfigError):
    kind = "OutOfOrderTransition"

    def __init__(self, value: Any, effective_at: datetime, last_at: datetime):
        super().__init__(
            f"Cannot add {value} at {effective_at.isoformat()} when there is a "
            f"later transition already scheduled ({last_at.isoformat()})",
            value=value,
            effective_at=effective_at,
            last_at=last_at,
        )
        self.value = value
        self.effective_at = effective_at
        self.last_at = last_at


class ConflictingScheduleUpdate(TldConfigError):
    kind = "ConflictingScheduleUpdate"

    def __init__(self, field_name: str):
        super().__init__(
            f"Don't pass both a full schedule and a single transition for {field_name}",
            field_name=field_name,
        )
        self.field_name = field_name


class MissingStartOfTime(TldConfigError):
    kind = "MissingStartOfTime"

    def __init__(self) -> None:
        super().__init__("Must provide transition entry for the start of time")


class InvalidTimestamp(TldConfigError):
    kind = "InvalidTimestamp"

    def __init__(
        self, value: datetime, reason: str = "has no timezone; times must be UTC-aware"
    ):
        super().__init__(f"Timestamp {value.isoformat()} {reason}", value=value)
        self.value = value


class CurrencyMismatch(TldConfigError):
    kind = "CurrencyMismatch"

    def __init__(self, field_name: str, expected: str, found: Iterable[str]):
        found_sorted = sorted(set(found))
        super().__init__(
            f"{field_name} must be in currency {expected} "
            f"(found {', '.join(found_sorted)})",
            field_name=field_name,
            expected=expected,
            found=found_sorted,
        )
        self.field_name = field_name
        self.expected = expected
        self.found = found_sorted


class NegativeCost(TldConfigError):
    kind = "NegativeCost"

    def __init__(self, field_name: str, amount: Any):
        super().__init__(
            f"{field_name} cannot be negative (got {amount})",
            field_name=field_name,
            amount=amount,
        )
        self.field_name = field_name
        self.amount = amount


# =============================================================================
# Validator errors
# =============================================================================


class AlreadyExists(TldConfigError):
    kind = "AlreadyExists"

    def __init__(self, tld: str):
        super().__init__(f"TLD '{tld}' already exists", tld=tld)
        self.tld = tld


class NotFound(TldConfigError):
    kind = "NotFound"

    def __init__(self, tld: str):
        super().__init__(f"TLD '{tld}' does not exist", tld=tld)
        self.tld = tld


class NotCanonical(TldConfigError):
    kind = "NotCanonical"

    def __init__(self, tld: str, canonical: str):
        super().__init__(
            f"TLD '{tld}' should be given in the canonical form '{canonical}'",
            tld=tld,
            canonical=canonical,
        )
        self.tld = tld
        self.canonical = canonical


class InvalidIdentityFormat(TldConfigError):
    kind = "InvalidIdentityFormat"

    def __init__(self, tld: str, reason: str = "TLDs cannot begin with a number"):
        super().__init__(reason, tld=tld)
        self.tld = tld


class BatchIdentityConflict(TldConfigError):
    kind = "BatchIdentityConflict"

    def __init__(self, field_name: str, count: int):
        super().__init__(
            f"Can't update {field_name} on multiple TLDs simultaneously "
            f"({count} given)",
            field_name=field_name,
            count=count,
        )
        self.field_name = field_name
        self.count = count


class UnknownReference(TldConfigError):
    kind = "UnknownReference"

    def __init__(self, catalog: str, missing: Iterable[str]):
        missing_list = list(missing)
        super().__init__(
            f"Unknown {catalog} name(s) specified: [{', '.join(missing_list)}]",
            catalog=catalog,
            missing=missing_list,
        )
        self.catalog = catalog
        self.missing = missing_list


class NamingConventionViolation(TldConfigError):
    kind = "NamingConventionViolation"

    def __init__(self, tld: str, names: Iterable[str]):
        name_list = list(names)
        super().__init__(
            f"The reserved list(s) {', '.join(name_list)} "
            f"cannot be applied to the tld {tld}",
            tld=tld,
            names=name_list,
        )
        self.tld = tld
        self.names = name_list


class InvalidEnumValue(TldConfigError):
    kind = "InvalidEnumValue"

    def __init__(self, field_name: str, values: Iterable[str], domain: Iterable[str]):
        value_list = list(values)
        domain_list = list(domain)
        super().__init__(
            f"{field_name} [{', '.join(value_list)}] contained invalid value(s). "
            f"Possible values: [{', '.join(domain_list)}]",
            field_name=field_name,
            values=value_list,
            domain=domain_list,
        )
        self.field_name = field_name
        self.values = value_list
        self.domain = domain_list


class DuplicateInput(TldConfigError):
    kind = "DuplicateInput"

    def __init__(self, duplicates: Iterable[str]):
        dupes = list(duplicates)
        super().__init__(
            f"Duplicate arguments found: '{', '.join(dupes)}'", duplicates=dupes
        )
        self.duplicates = dupes


class ConflictingOverride(TldConfigError):
    kind = "ConflictingOverride"

    def __init__(self, field_name: str):
        super().__init__(
            f"Don't pass both a replacement and add/remove values for {field_name}",
            field_name=field_name,
        )
        self.field_name = field_name


class MissingRequiredField(TldConfigError):
    kind = "MissingRequiredField"

    def __init__(self, field_name: str, message: str):
        super().__init__(message, field_name=field_name)
        self.field_name = field_name


class InvalidParameter(TldConfigError):
    kind = "InvalidParameter"

    def __init__(self, parameter: str, value: str, reason: str = "Invalid format"):
        super().__init__(
            f'{reason}: "{value}" for {parameter}', parameter=parameter, value=value
        )
        self.parameter = parameter
        self.value = value


# =============================================================================
# Store errors
# =============================================================================


class VersionConflict(TldConfigError):
    kind = "VersionConflict"

    def __init__(self, tld: str, expected: int | None, actual: int | None):
        super().__init__(
            f"TLD '{tld}' was modified concurrently "
            f"(expected revision {expected}, found {actual})",
            tld=tld,
            expected=expected,
            actual=actual,
        )
        self.tld = tld
        self.expected = expected
        self.actual = actual
