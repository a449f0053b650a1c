"""
Tests for promotion templates.
"""

from datetime import datetime, timedelta
from decimal import Decimal

from pos_promotions.services import discounts, templates
from tests.factories import SATURDAY_NOON, WEDNESDAY_NOON, line

NOW = datetime(2026, 6, 1, 9, 0, 0)


class TestPercentageTemplate:

    def test_defaults(self):
        promo = templates.percentage_discount(1, "Sale", "20% off", Decimal("20"), ["sale20 "], now=NOW)

        assert promo.type == "percentage"
        assert promo.id is None
        assert promo.store_id == 1
        assert promo.discount_value == Decimal("20")
        assert promo.start_date == NOW
        assert promo.end_date == NOW + timedelta(days=30)
        assert promo.discount_codes == ["SALE20"]
        assert promo.is_active
        assert promo.minimum_purchase is None
        assert promo.maximum_discount is None

    def test_options(self):
        start = datetime(2026, 7, 1)
        end = datetime(2026, 7, 31)
        promo = templates.percentage_discount(
            2, "Sale", "", Decimal("15"), ["A", "B"],
            minimum_purchase=Decimal("50"),
            maximum_discount=Decimal("25"),
            start_date=start,
            end_date=end,
            usage_limit=100,
            customer_usage_limit=1,
            applicable_to_categories=["drinks"],
        )

        assert promo.start_date == start
        assert promo.end_date == end
        assert promo.minimum_purchase == Decimal("50")
        assert promo.maximum_discount == Decimal("25")
        assert promo.usage_limit == 100
        assert promo.customer_usage_limit == 1
        assert promo.applicable_to_categories == ["drinks"]


class TestBogoTemplate:

    def test_fields(self):
        promo = templates.bogo_promotion(
            1, "2+1", "", 2, 1, "percentage", ["b2g1"],
            get_discount_value=Decimal("50"),
            now=NOW,
        )

        assert promo.type == "buy_x_get_y"
        assert promo.discount_value == 0
        assert promo.buy_quantity == 2
        assert promo.get_quantity == 1
        assert promo.get_discount_type == "percentage"
        assert promo.get_discount_value == Decimal("50")
        assert promo.end_date == NOW + timedelta(days=30)


class TestHappyHourTemplate:

    def test_daily_schedule(self):
        promo = templates.happy_hour_promotion(
            1, "Happy hour", "", Decimal("15"), "17:00:00", "19:00:00", ["happy"], now=NOW,
        )

        assert promo.type == "time_based"
        assert promo.time_based_type == "daily"
        assert promo.active_time_start == "17:00:00"
        assert promo.active_time_end == "19:00:00"

    def test_evaluated_inside_hours(self):
        promo = templates.happy_hour_promotion(
            1, "Happy hour", "", Decimal("15"), "17:00:00", "19:00:00", ["happy"], now=NOW,
        )
        at_six = WEDNESDAY_NOON.replace(hour=18)

        result = discounts.evaluate(promo, [line("A", 2, 10)], Decimal("20"), at_six)

        assert result.valid
        assert result.discount_amount == Decimal("3")


class TestWeekendTemplate:

    def test_defaults(self):
        promo = templates.weekend_special(1, "Weekend", "", Decimal("10"), ["weekend"], now=NOW)

        assert promo.type == "time_based"
        assert promo.time_based_type == "weekly"
        assert promo.active_days == [0, 6]
        assert promo.active_time_start == "10:00:00"
        assert promo.active_time_end == "22:00:00"

    def test_custom_hours_keep_weekend_days(self):
        promo = templates.weekend_special(
            1, "Weekend", "", Decimal("10"), [],
            active_time_start="08:00:00",
            active_time_end="12:00:00",
            now=NOW,
        )

        assert promo.active_days == [0, 6]
        assert promo.active_time_start == "08:00:00"
        assert promo.active_time_end == "12:00:00"

    def test_active_on_weekend_only(self):
        promo = templates.weekend_special(1, "Weekend", "", Decimal("10"), ["weekend"], now=NOW)

        assert discounts.is_active(promo, SATURDAY_NOON)
        assert not discounts.is_active(promo, WEDNESDAY_NOON)


class TestDefaultWindow:

    def test_starts_on_store_clock(self, monkeypatch):
        store_moment = datetime(2026, 10, 19, 0, 17, 12)
        monkeypatch.setattr(templates, "store_now", lambda tz_name=None: store_moment)

        promo = templates.percentage_discount(1, "Sale", "10% off", Decimal("10"), ["SALE"])

        assert promo.start_date == store_moment
        assert promo.end_date == store_moment + timedelta(days=30)
        assert discounts.is_active(promo, store_moment)
