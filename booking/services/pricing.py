# booking/services/pricing.py
#
# Purpose:
# - Interpret the salon's text price column ("45", "20+", "POA") once, at the
#   edge, as a Price value so totals never re-parse strings.
# - Sum prices for a multi-service booking or a POS cart.
# - Format prices and durations for display.
#
# Price kinds:
#   FIXED           plain amount                    "45"   -> 45
#   MINIMUM         amount with a "+" suffix        "45+"  -> 45 or more
#   ON_APPLICATION  "POA" or anything unparsable    "POA"  -> quoted manually

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Optional

FIXED = "fixed"
MINIMUM = "minimum"
ON_APPLICATION = "on_application"

POA_LABEL = "POA"


@dataclass(frozen=True)
class Price:
    kind: str
    amount: Optional[Decimal] = None

    @property
    def is_numeric(self) -> bool:
        return self.kind != ON_APPLICATION

    @property
    def has_plus(self) -> bool:
        return self.kind == MINIMUM

    @classmethod
    def fixed(cls, amount) -> "Price":
        return cls(FIXED, Decimal(str(amount)))

    @classmethod
    def minimum(cls, amount) -> "Price":
        return cls(MINIMUM, Decimal(str(amount)))

    @classmethod
    def on_application(cls) -> "Price":
        return cls(ON_APPLICATION)

    def __add__(self, other: "Price") -> "Price":
        if not self.is_numeric or not other.is_numeric:
            return Price.on_application()
        kind = MINIMUM if (self.has_plus or other.has_plus) else FIXED
        return Price(kind, self.amount + other.amount)

    def __sub__(self, other: "Price") -> "Price":
        if not self.is_numeric or not other.is_numeric:
            return Price.on_application()
        kind = MINIMUM if (self.has_plus or other.has_plus) else FIXED
        return Price(kind, self.amount - other.amount)


ZERO = Price.fixed(0)


def parse_price(value) -> Price:
    """
    Turn a stored price into a Price.

    Args:
        value: str, int, Decimal, float or None. Empty/None means zero.

    Returns:
        Price: "45+" -> MINIMUM 45, "POA" -> ON_APPLICATION, "30" -> FIXED 30.
    """
    if isinstance(value, Price):
        return value
    if value is None:
        return ZERO
    if isinstance(value, (int, float, Decimal)) and not isinstance(value, bool):
        return Price.fixed(value)

    text = str(value).strip()
    if not text:
        return ZERO
    if text.upper() == POA_LABEL:
        return Price.on_application()

    kind = FIXED
    if text.endswith("+"):
        kind = MINIMUM
        text = text[:-1].strip()

    try:
        amount = Decimal(text)
    except InvalidOperation:
        return Price.on_application()
    if not amount.is_finite():
        return Price.on_application()

    return Price(kind, amount)


def net_service_price(regular_price, discount=None) -> Price:
    """Regular price minus discount, keeping the "+" / POA markers."""
    return parse_price(regular_price) - parse_price(discount)


def total_price(services) -> Price:
    """
    Sum the net price of each service.

    Any POA service makes the whole total POA; otherwise any "+" service
    makes the total a minimum.
    """
    total = ZERO
    for service in services:
        total = total + net_service_price(service.regular_price, service.discount)
    return total


def _plain_amount(amount: Decimal) -> str:
    # "45" rather than "45.00" for whole amounts, as the price column stores them.
    if amount == amount.to_integral_value():
        return str(amount.quantize(Decimal(1)))
    return str(amount.normalize())


def as_stored_text(price: Price) -> str:
    """Render a Price back into the text price column format."""
    if not price.is_numeric:
        return POA_LABEL
    suffix = "+" if price.has_plus else ""
    return f"{_plain_amount(price.amount)}{suffix}"


def format_price(price, currency_symbol="$") -> str:
    """
    Format for display with currency symbol and two decimals.

    Examples:
        "45"  -> "$45.00"
        "45+" -> "$45.00+"
        "POA" -> "POA"
    """
    price = parse_price(price)
    if not price.is_numeric:
        return POA_LABEL
    suffix = "+" if price.has_plus else ""
    return f"{currency_symbol}{price.amount:.2f}{suffix}"


def format_duration(duration_minutes) -> str:
    """
    Format duration in a user-friendly way ("45 min", "1h", "1h 30min").
    """
    duration_minutes = int(duration_minutes or 0)
    if duration_minutes < 60:
        return f"{duration_minutes} min"

    hours = duration_minutes // 60
    minutes = duration_minutes % 60

    if minutes == 0:
        return f"{hours}h"

    return f"{hours}h {minutes}min"
