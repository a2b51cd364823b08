from decimal import Decimal, ROUND_HALF_UP

# Smallest-unit factor for the two-decimal currencies we charge in
MINOR_UNITS_PER_MAJOR = 100


def to_minor_units(amount) -> int:
    """Price in major units (e.g. 10.5) -> integer minor units (1050), half-up."""
    minor = Decimal(str(amount)) * MINOR_UNITS_PER_MAJOR
    return int(minor.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def from_minor_units(amount: int) -> float:
    return float(Decimal(amount) / MINOR_UNITS_PER_MAJOR)
