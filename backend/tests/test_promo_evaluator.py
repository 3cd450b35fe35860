"""
Tests for promo code evaluation.
"""
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from types import SimpleNamespace

import pytest

from storefront.services.promo_evaluator import PromoRejection, evaluate, normalize_code

NOW = datetime(2025, 6, 15, 12, 0, tzinfo=timezone.utc)


def make_promo(**overrides) -> SimpleNamespace:
    data = {
        "code": "SAVE20",
        "is_active": True,
        "valid_from": NOW - timedelta(days=1),
        "valid_to": NOW + timedelta(days=1),
        "usage_limit": None,
        "usage_count": 0,
        "min_purchase": None,
        "applicable_categories": None,
        "discount_percentage": 20,
        "max_discount": Decimal("1000"),
    }
    data.update(overrides)
    return SimpleNamespace(**data)


class TestDiscountMath:
    """Percentage discount with an optional cap."""

    def test_discount_is_capped(self):
        result = evaluate(make_promo(), Decimal("10000"), now=NOW)

        assert result.ok
        assert result.discount_amount == Decimal("1000")

    def test_discount_below_cap(self):
        result = evaluate(make_promo(), Decimal("3000"), now=NOW)

        assert result.ok
        assert result.discount_amount == Decimal("600")

    def test_uncapped_discount(self):
        result = evaluate(make_promo(max_discount=None), Decimal("10000"), now=NOW)

        assert result.discount_amount == Decimal("2000")

    def test_discount_rounds_half_up(self):
        result = evaluate(
            make_promo(discount_percentage=10, max_discount=None),
            Decimal("1005"),
            now=NOW,
            places=0,
        )

        assert result.discount_amount == Decimal("101")


class TestRejections:
    """Each guard, in evaluation order."""

    def test_unknown_code(self):
        result = evaluate(None, Decimal("100"), now=NOW)

        assert not result.ok
        assert result.reason is PromoRejection.CODE_NOT_FOUND

    def test_inactive(self):
        result = evaluate(make_promo(is_active=False), Decimal("100"), now=NOW)

        assert result.reason is PromoRejection.INACTIVE

    def test_not_yet_valid(self):
        promo = make_promo(valid_from=NOW + timedelta(seconds=1))

        assert evaluate(promo, Decimal("100"), now=NOW).reason is PromoRejection.OUT_OF_WINDOW

    def test_expired(self):
        promo = make_promo(valid_to=NOW - timedelta(seconds=1))

        assert evaluate(promo, Decimal("100"), now=NOW).reason is PromoRejection.OUT_OF_WINDOW

    def test_window_bounds_are_inclusive(self):
        promo = make_promo(valid_from=NOW, valid_to=NOW)

        assert evaluate(promo, Decimal("100"), now=NOW).ok

    def test_naive_stored_datetimes_are_utc(self):
        promo = make_promo(
            valid_from=(NOW - timedelta(hours=1)).replace(tzinfo=None),
            valid_to=(NOW + timedelta(hours=1)).replace(tzinfo=None),
        )

        assert evaluate(promo, Decimal("100"), now=NOW).ok

    def test_usage_exhausted(self):
        promo = make_promo(usage_limit=5, usage_count=5)

        assert evaluate(promo, Decimal("100"), now=NOW).reason is PromoRejection.USAGE_EXHAUSTED

    def test_below_minimum(self):
        promo = make_promo(min_purchase=Decimal("2000"))

        result = evaluate(promo, Decimal("1999"), now=NOW)

        assert result.reason is PromoRejection.BELOW_MINIMUM
        assert "2000" in result.message

    def test_minimum_is_inclusive(self):
        promo = make_promo(min_purchase=Decimal("2000"))

        assert evaluate(promo, Decimal("2000"), now=NOW).ok

    def test_category_mismatch(self):
        promo = make_promo(applicable_categories=["hoodies"])

        result = evaluate(promo, Decimal("100"), ["t-shirts"], now=NOW)

        assert result.reason is PromoRejection.CATEGORY_MISMATCH

    def test_category_match_is_case_insensitive(self):
        promo = make_promo(applicable_categories=["Hoodies"])

        assert evaluate(promo, Decimal("100"), ["t-shirts", "HOODIES"], now=NOW).ok

    def test_restricted_code_with_no_categories(self):
        promo = make_promo(applicable_categories=["hoodies"])

        assert evaluate(promo, Decimal("100"), [], now=NOW).reason is PromoRejection.CATEGORY_MISMATCH

    def test_inactive_reported_before_window(self):
        promo = make_promo(is_active=False, valid_to=NOW - timedelta(days=1))

        assert evaluate(promo, Decimal("100"), now=NOW).reason is PromoRejection.INACTIVE

    def test_evaluation_does_not_consume_usage(self):
        promo = make_promo(usage_limit=1, usage_count=0)

        evaluate(promo, Decimal("100"), now=NOW)
        evaluate(promo, Decimal("100"), now=NOW)

        assert promo.usage_count == 0


@pytest.mark.parametrize("raw,expected", [("save20", "SAVE20"), ("  Save20 ", "SAVE20")])
def test_normalize_code(raw, expected):
    assert normalize_code(raw) == expected
