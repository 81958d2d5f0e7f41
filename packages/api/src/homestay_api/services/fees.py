# This project was developed with assistance from AI tools.
"""Registration fee calculation.

The annual base fee depends on the property category. Discounts are applied
in sequence, each on the amount left by the previous one: multi-year
validity, then female owner, then the Pangi sub-division concession.
"""

from dataclasses import asdict, dataclass
from decimal import ROUND_HALF_UP, Decimal

from homestay_db.enums import OwnerGender, PropertyCategory

from ..core.config import settings

_CENTS = Decimal("0.01")
_HUNDRED = Decimal("100")
_DISCOUNTED_VALIDITY_YEARS = 3


@dataclass(frozen=True)
class FeeBreakdown:
    base_fee: Decimal
    validity_discount: Decimal
    female_owner_discount: Decimal
    pangi_discount: Decimal
    total_fee: Decimal

    def as_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def zero(cls) -> "FeeBreakdown":
        nil = Decimal("0.00")
        return cls(nil, nil, nil, nil, nil)


def _money(value: Decimal) -> Decimal:
    return value.quantize(_CENTS, rounding=ROUND_HALF_UP)


def annual_base_fee(category: PropertyCategory) -> Decimal:
    return {
        PropertyCategory.DIAMOND: settings.BASE_FEE_DIAMOND,
        PropertyCategory.GOLD: settings.BASE_FEE_GOLD,
        PropertyCategory.SILVER: settings.BASE_FEE_SILVER,
    }[category]


def calculate_fees(
    category: PropertyCategory,
    validity_years: int = 1,
    owner_gender: OwnerGender | None = None,
    is_pangi_sub_division: bool = False,
) -> FeeBreakdown:
    """Compute the fee breakdown for a registration.

    >>> calculate_fees(PropertyCategory.SILVER).total_fee
    Decimal('3000.00')
    """
    base = _money(annual_base_fee(category) * max(validity_years, 1))
    remaining = base

    validity_discount = Decimal("0.00")
    if validity_years >= _DISCOUNTED_VALIDITY_YEARS:
        validity_discount = _money(remaining * settings.THREE_YEAR_DISCOUNT_PCT / _HUNDRED)
        remaining -= validity_discount

    female_discount = Decimal("0.00")
    if owner_gender == OwnerGender.FEMALE:
        female_discount = _money(remaining * settings.FEMALE_OWNER_DISCOUNT_PCT / _HUNDRED)
        remaining -= female_discount

    pangi_discount = Decimal("0.00")
    if is_pangi_sub_division:
        pangi_discount = _money(remaining * settings.PANGI_DISCOUNT_PCT / _HUNDRED)
        remaining -= pangi_discount

    return FeeBreakdown(
        base_fee=base,
        validity_discount=validity_discount,
        female_owner_discount=female_discount,
        pangi_discount=pangi_discount,
        total_fee=max(remaining, Decimal("0.00")),
    )
