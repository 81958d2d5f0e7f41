# This project was developed with assistance from AI tools.
"""Tests for registration fee calculation."""

from decimal import Decimal

import pytest
from homestay_db.enums import OwnerGender, PropertyCategory

from homestay_api.services.fees import FeeBreakdown, annual_base_fee, calculate_fees


@pytest.mark.parametrize(
    "category,expected",
    [
        (PropertyCategory.DIAMOND, Decimal("10000")),
        (PropertyCategory.GOLD, Decimal("6000")),
        (PropertyCategory.SILVER, Decimal("3000")),
    ],
)
def test_annual_base_fee(category, expected):
    assert annual_base_fee(category) == expected


def test_single_year_has_no_discounts():
    fees = calculate_fees(PropertyCategory.GOLD)
    assert fees.base_fee == Decimal("6000.00")
    assert fees.validity_discount == Decimal("0.00")
    assert fees.female_owner_discount == Decimal("0.00")
    assert fees.pangi_discount == Decimal("0.00")
    assert fees.total_fee == Decimal("6000.00")


def test_three_year_validity_discount():
    fees = calculate_fees(PropertyCategory.SILVER, validity_years=3)
    assert fees.base_fee == Decimal("9000.00")
    assert fees.validity_discount == Decimal("900.00")
    assert fees.total_fee == Decimal("8100.00")


def test_two_years_is_not_discounted():
    fees = calculate_fees(PropertyCategory.SILVER, validity_years=2)
    assert fees.validity_discount == Decimal("0.00")
    assert fees.total_fee == Decimal("6000.00")


def test_female_owner_discount():
    fees = calculate_fees(PropertyCategory.GOLD, owner_gender=OwnerGender.FEMALE)
    assert fees.female_owner_discount == Decimal("300.00")
    assert fees.total_fee == Decimal("5700.00")


def test_male_owner_gets_no_gender_discount():
    fees = calculate_fees(PropertyCategory.GOLD, owner_gender=OwnerGender.MALE)
    assert fees.female_owner_discount == Decimal("0.00")


def test_discounts_compound_in_order():
    """Each discount applies to what the previous one left."""
    fees = calculate_fees(
        PropertyCategory.SILVER,
        validity_years=3,
        owner_gender=OwnerGender.FEMALE,
        is_pangi_sub_division=True,
    )
    assert fees.base_fee == Decimal("9000.00")
    assert fees.validity_discount == Decimal("900.00")
    assert fees.female_owner_discount == Decimal("405.00")
    assert fees.pangi_discount == Decimal("3847.50")
    assert fees.total_fee == Decimal("3847.50")
    assert (
        fees.base_fee - fees.validity_discount - fees.female_owner_discount - fees.pangi_discount
        == fees.total_fee
    )


def test_pangi_halves_the_fee():
    fees = calculate_fees(PropertyCategory.DIAMOND, is_pangi_sub_division=True)
    assert fees.total_fee == Decimal("5000.00")


def test_zero_validity_counts_as_one_year():
    assert calculate_fees(PropertyCategory.SILVER, validity_years=0).base_fee == Decimal("3000.00")


def test_breakdown_as_dict():
    data = calculate_fees(PropertyCategory.SILVER).as_dict()
    assert set(data) == {
        "base_fee",
        "validity_discount",
        "female_owner_discount",
        "pangi_discount",
        "total_fee",
    }
    assert FeeBreakdown.zero().total_fee == Decimal("0.00")
