"""Enumerated types for TLD configuration."""

import enum


class TldState(str, enum.Enum):
    """Lifecycle state of a TLD, scheduled over time."""

    PREDELEGATION = "PREDELEGATION"  # Not yet in the root zone
    QUIET_PERIOD = "QUIET_PERIOD"  # Delegated, no registrations accepted
    START_DATE_SUNRISE = "START_DATE_SUNRISE"  # Trademark holders only
    GENERAL_AVAILABILITY = "GENERAL_AVAILABILITY"
    PDT = "PDT"  # Pre-delegation testing

    def __str__(self) -> str:
        return self.value


class TldType(str, enum.Enum):
    """Whether a TLD is real or only used for testing."""

    REAL = "REAL"
    TEST = "TEST"

    def __str__(self) -> str:
        return self.value


class IdnTable(str, enum.Enum):
    """IDN tables a TLD may accept labels from."""

    EXTENDED_LATIN = "EXTENDED_LATIN"
    UNCONFUSABLE_LATIN = "UNCONFUSABLE_LATIN"
    JA = "JA"

    def __str__(self) -> str:
        return self.value
