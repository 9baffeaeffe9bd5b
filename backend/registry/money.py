"""Money value type used by billing cost fields and fee schedules."""

from __future__ import annotations

import re
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation

# Minor-unit digits for the currencies we bill in; anything else uses 2.
CURRENCY_SCALE = {"JPY": 0, "KRW": 0}

_MONEY_RE = re.compile(r"^\s*([A-Za-z]{3})\s+(-?[0-9]+(?:\.[0-9]+)?)\s*$")


@dataclass(frozen=True, order=False)
class Money:
    """An amount in a single currency.

    Equality is same-currency only: ``Money("USD", 1) != Money("JPY", 1)``.
    No conversion between currencies is ever attempted.
    """

    currency: str
    amount: Decimal

    def __post_init__(self) -> None:
        currency = self.currency.upper()
        scale = CURRENCY_SCALE.get(currency, 2)
        amount = Decimal(self.amount)
        quantized = amount.quantize(Decimal(1).scaleb(-scale))
        if quantized != amount:
            raise ValueError(
                f"{currency} amounts allow at most {scale} decimal places: {amount}"
            )
        object.__setattr__(self, "currency", currency)
        object.__setattr__(self, "amount", quantized)

    @classmethod
    def of(cls, currency: str, amount: Decimal | int | str) -> Money:
        return cls(currency, Decimal(str(amount)))

    @classmethod
    def zero(cls, currency: str) -> Money:
        return cls(currency, Decimal(0))

    @classmethod
    def parse(cls, text: str) -> Money:
        """Parse ``"USD 42.42"`` style strings.

        Raises:
            ValueError: If the text isn't ``<currency> <amount>``.
        """
        m = _MONEY_RE.match(text.strip().strip('"'))
        if not m:
            raise ValueError(f"Invalid money format: {text!r}")
        try:
            return cls(m.group(1), Decimal(m.group(2)))
        except InvalidOperation as e:
            raise ValueError(f"Invalid money amount: {text!r}") from e

    @property
    def is_negative(self) -> bool:
        return self.amount < 0

    def __str__(self) -> str:
        return f"{self.currency} {self.amount}"
