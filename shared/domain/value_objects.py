"""
Common Value Objects

Value objects used across multiple domains:
- Money: Represents monetary amounts with currency
"""

from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP

from shared.domain.base import ValueObject

SUPPORTED_CURRENCIES = ('NGN', 'GHS', 'ZAR', 'KES', 'USD')

# Paystack expresses every supported currency in 1/100 subunits (kobo, pesewas, cents).
MINOR_UNITS_PER_MAJOR = 100


@dataclass(frozen=True)
class Money(ValueObject):
    """
    Money value object

    Represents a non-negative, finite monetary amount with currency.
    Immutable and supports arithmetic operations.
    """
    amount: Decimal
    currency: str = 'NGN'

    def __post_init__(self):
        if not isinstance(self.amount, Decimal):
            object.__setattr__(self, 'amount', Decimal(str(self.amount)))
        if not self.amount.is_finite():
            raise ValueError("Amount must be a finite number")
        if self.amount < 0:
            raise ValueError("Amount cannot be negative")
        if self.currency not in SUPPORTED_CURRENCIES:
            raise ValueError(f"Unsupported currency: {self.currency}")

    @classmethod
    def from_minor_units(cls, minor: int, currency: str = 'NGN') -> 'Money':
        """Build Money from a gateway amount expressed in kobo/cents"""
        return cls(Decimal(int(minor)) / MINOR_UNITS_PER_MAJOR, currency)

    def to_minor_units(self) -> int:
        """Amount in kobo/cents, as payment gateways expect it"""
        return int((self.amount * MINOR_UNITS_PER_MAJOR).quantize(Decimal('1'), rounding=ROUND_HALF_UP))

    def quantized(self) -> 'Money':
        """Amount rounded to two decimal places"""
        return Money(self.amount.quantize(Decimal('0.01'), rounding=ROUND_HALF_UP), self.currency)

    def __add__(self, other: 'Money') -> 'Money':
        if not isinstance(other, Money):
            raise TypeError("Can only add Money to Money")
        if self.currency != other.currency:
            raise ValueError(f"Cannot add different currencies: {self.currency} and {other.currency}")
        return Money(self.amount + other.amount, self.currency)

    def __sub__(self, other: 'Money') -> 'Money':
        if not isinstance(other, Money):
            raise TypeError("Can only subtract Money from Money")
        if self.currency != other.currency:
            raise ValueError(f"Cannot subtract different currencies: {self.currency} and {other.currency}")
        return Money(self.amount - other.amount, self.currency)

    def __mul__(self, factor) -> 'Money':
        if not isinstance(factor, (int, Decimal)):
            raise TypeError("Can only multiply Money by int or Decimal")
        return Money(self.amount * factor, self.currency)

    def __str__(self):
        return f"{self.amount:,.2f} {self.currency}"

    def __repr__(self):
        return f"Money({self.amount}, '{self.currency}')"
