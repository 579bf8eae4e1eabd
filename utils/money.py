from decimal import Decimal
from bson.decimal128 import Decimal128

def to_db(amount) -> Decimal128:
    """Store money as Decimal128 so prices and totals stay exact."""
    return Decimal128(Decimal(str(amount)))

def from_db(value) -> Decimal:
    if isinstance(value, Decimal128):
        return value.to_decimal()
    return Decimal(str(value))
