"""
Tests for promotion definition validation.
"""

from datetime import date, datetime, time
from decimal import Decimal

import pytest
from pydantic import ValidationError

from pos_promotions.schemas.promotion import (
    BuyXGetYPromotion,
    CartLine,
    FixedAmountPromotion,
    TimeBasedPromotion,
    ValidateCodeRequest,
    promotion_adapter,
)
from tests.factories import (
    WINDOW_END,
    WINDOW_START,
    bogo_promotion,
    percentage_promotion,
    time_based_promotion,
)


class TestPromotionDefinition:

    def test_dispatch_on_type(self):
        promo = promotion_adapter.validate_python({
            "type": "fixed_amount",
            "store_id": 1,
            "name": "Five off",
            "discount_value": "5",
            "start_date": "2026-01-01T00:00:00",
            "end_date": "2026-02-01T00:00:00",
        })

        assert isinstance(promo, FixedAmountPromotion)
        assert promo.discount_value == Decimal("5")
        assert promo.usage_count == 0
        assert promo.is_active

    def test_unknown_type_rejected(self):
        with pytest.raises(ValidationError):
            promotion_adapter.validate_python({
                "type": "loyalty_points",
                "store_id": 1,
                "name": "Points",
                "start_date": WINDOW_START,
                "end_date": WINDOW_END,
            })

    def test_fields_of_other_type_rejected(self):
        with pytest.raises(ValidationError):
            percentage_promotion(buy_quantity=2)

    def test_fixed_amount_has_no_cap(self):
        with pytest.raises(ValidationError):
            FixedAmountPromotion(
                store_id=1,
                name="Cap",
                discount_value=Decimal("5"),
                maximum_discount=Decimal("3"),
                start_date=WINDOW_START,
                end_date=WINDOW_END,
            )

    def test_percentage_above_hundred_rejected(self):
        with pytest.raises(ValidationError):
            percentage_promotion(discount_value=Decimal("120"))

    def test_end_before_start_rejected(self):
        with pytest.raises(ValidationError):
            percentage_promotion(start_date=WINDOW_END, end_date=WINDOW_START)

    def test_definitions_are_frozen(self):
        promo = percentage_promotion()
        with pytest.raises(ValidationError):
            promo.discount_value = Decimal("99")


class TestBuyXGetYDefinition:

    def test_defaults(self):
        promo = BuyXGetYPromotion(
            store_id=1,
            name="BOGO",
            get_discount_type="free",
            start_date=WINDOW_START,
            end_date=WINDOW_END,
        )

        assert promo.buy_quantity == 1
        assert promo.get_quantity == 1
        assert promo.discount_value == 0

    def test_discount_value_must_be_zero(self):
        with pytest.raises(ValidationError):
            bogo_promotion(discount_value=Decimal("10"))

    def test_get_value_required_unless_free(self):
        with pytest.raises(ValidationError):
            bogo_promotion(get_discount_type="percentage")

    def test_zero_buy_quantity_rejected(self):
        with pytest.raises(ValidationError):
            bogo_promotion(buy_quantity=0)


class TestTimeBasedDefinition:

    def test_time_objects_are_formatted(self):
        promo = time_based_promotion(active_time_start=time(9, 5), active_time_end=time(17, 30, 15))

        assert promo.active_time_start == "09:05:00"
        assert promo.active_time_end == "17:30:15"

    @pytest.mark.parametrize("value", ["9:00:00", "09:00", "24:00:00", "noon"])
    def test_malformed_time_rejected(self, value):
        with pytest.raises(ValidationError):
            time_based_promotion(active_time_start=value, active_time_end="18:00:00")

    def test_weekly_requires_days(self):
        with pytest.raises(ValidationError):
            time_based_promotion(time_based_type="weekly")

    def test_weekday_range(self):
        with pytest.raises(ValidationError):
            time_based_promotion(time_based_type="weekly", active_days=[7])

    def test_specific_dates_required(self):
        with pytest.raises(ValidationError):
            time_based_promotion(time_based_type="specific_dates")

    def test_specific_dates_accept_date_objects(self):
        promo = time_based_promotion(
            time_based_type="specific_dates",
            specific_dates=[date(2026, 12, 24), "2026-12-31"],
        )
        assert promo.specific_dates == ["2026-12-24", "2026-12-31"]

    def test_unknown_schedule_rejected(self):
        with pytest.raises(ValidationError):
            TimeBasedPromotion(
                store_id=1,
                name="Monthly",
                discount_value=Decimal("5"),
                time_based_type="monthly",
                start_date=WINDOW_START,
                end_date=WINDOW_END,
            )


class TestCartLine:

    def test_line_total(self):
        assert CartLine(product_id="A", quantity=3, unit_price=Decimal("2.50")).line_total == Decimal("7.50")

    @pytest.mark.parametrize("quantity", [0, -1])
    def test_quantity_must_be_positive(self, quantity):
        with pytest.raises(ValidationError):
            CartLine(product_id="A", quantity=quantity, unit_price=Decimal("1"))

    def test_negative_price_rejected(self):
        with pytest.raises(ValidationError):
            CartLine(product_id="A", quantity=1, unit_price=Decimal("-1"))


class TestValidateCodeRequest:

    def test_cart_total_defaults_to_lines(self):
        request = ValidateCodeRequest(
            code="x",
            store_id=1,
            items=[
                {"product_id": "A", "quantity": 2, "unit_price": "10"},
                {"product_id": "B", "quantity": 1, "unit_price": "5.5"},
            ],
        )
        assert request.cart_total == Decimal("25.5")

    def test_explicit_order_total_wins(self):
        request = ValidateCodeRequest(
            code="x",
            store_id=1,
            items=[{"product_id": "A", "quantity": 1, "unit_price": "10"}],
            order_total="40",
        )
        assert request.cart_total == Decimal("40")

    def test_empty_cart_rejected(self):
        with pytest.raises(ValidationError):
            ValidateCodeRequest(code="x", store_id=1, items=[])


def test_naive_and_aware_window_allowed():
    promo = percentage_promotion(
        start_date=datetime(2026, 1, 1),
        end_date=datetime.fromisoformat("2026-02-01T00:00:00+00:00"),
    )
    assert promo.end_date.tzinfo is not None
