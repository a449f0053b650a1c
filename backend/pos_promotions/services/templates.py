"""
Шаблоны типовых акций: скидка в процентах, BOGO, happy hour, выходные.

Только подставляют значения по умолчанию, ничего не проверяют сверх
валидации самих моделей. id и даты создания назначаются при сохранении.
"""
from datetime import datetime, timedelta
from decimal import Decimal
from typing import List, Optional, Tuple

from pos_promotions.core.config import settings
from pos_promotions.models.promotion import GetDiscountType, TimeBasedType
from pos_promotions.schemas.promotion import (
    PercentagePromotion,
    BuyXGetYPromotion,
    TimeBasedPromotion,
)
from pos_promotions.core.store import normalize_code, store_now


WEEKEND_DAYS = [0, 6]  # воскресенье и суббота


def _window(
    start_date: Optional[datetime],
    end_date: Optional[datetime],
    now: Optional[datetime],
) -> Tuple[datetime, datetime]:
    now = now or store_now()
    default_end = now + timedelta(days=settings.PROMOTION_DEFAULT_DURATION_DAYS)
    return start_date or now, end_date or default_end


def _codes(codes: List[str]) -> List[str]:
    return [normalize_code(code) for code in codes]


def percentage_discount(
    store_id: int,
    name: str,
    description: str,
    discount_value: Decimal,
    codes: List[str],
    *,
    minimum_purchase: Optional[Decimal] = None,
    maximum_discount: Optional[Decimal] = None,
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
    usage_limit: Optional[int] = None,
    customer_usage_limit: Optional[int] = None,
    applicable_to_products: Optional[List[str]] = None,
    applicable_to_categories: Optional[List[str]] = None,
    now: Optional[datetime] = None,
) -> PercentagePromotion:
    start, end = _window(start_date, end_date, now)
    return PercentagePromotion(
        store_id=store_id,
        name=name,
        description=description,
        discount_value=discount_value,
        minimum_purchase=minimum_purchase,
        maximum_discount=maximum_discount,
        start_date=start,
        end_date=end,
        discount_codes=_codes(codes),
        usage_limit=usage_limit,
        customer_usage_limit=customer_usage_limit,
        applicable_to_products=applicable_to_products,
        applicable_to_categories=applicable_to_categories,
        is_active=True,
    )


def bogo_promotion(
    store_id: int,
    name: str,
    description: str,
    buy_quantity: int,
    get_quantity: int,
    get_discount_type: GetDiscountType,
    codes: List[str],
    *,
    get_discount_value: Optional[Decimal] = None,
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
    usage_limit: Optional[int] = None,
    customer_usage_limit: Optional[int] = None,
    applicable_to_products: Optional[List[str]] = None,
    applicable_to_categories: Optional[List[str]] = None,
    now: Optional[datetime] = None,
) -> BuyXGetYPromotion:
    start, end = _window(start_date, end_date, now)
    return BuyXGetYPromotion(
        store_id=store_id,
        name=name,
        description=description,
        discount_value=Decimal("0"),
        buy_quantity=buy_quantity,
        get_quantity=get_quantity,
        get_discount_type=get_discount_type,
        get_discount_value=get_discount_value,
        start_date=start,
        end_date=end,
        discount_codes=_codes(codes),
        usage_limit=usage_limit,
        customer_usage_limit=customer_usage_limit,
        applicable_to_products=applicable_to_products,
        applicable_to_categories=applicable_to_categories,
        is_active=True,
    )


def happy_hour_promotion(
    store_id: int,
    name: str,
    description: str,
    discount_value: Decimal,
    active_time_start: str,
    active_time_end: str,
    codes: List[str],
    *,
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
    usage_limit: Optional[int] = None,
    customer_usage_limit: Optional[int] = None,
    applicable_to_products: Optional[List[str]] = None,
    applicable_to_categories: Optional[List[str]] = None,
    now: Optional[datetime] = None,
) -> TimeBasedPromotion:
    """Ежедневная скидка в заданный промежуток времени (HH:MM:SS)"""
    start, end = _window(start_date, end_date, now)
    return TimeBasedPromotion(
        store_id=store_id,
        name=name,
        description=description,
        discount_value=discount_value,
        time_based_type=TimeBasedType.DAILY,
        active_time_start=active_time_start,
        active_time_end=active_time_end,
        start_date=start,
        end_date=end,
        discount_codes=_codes(codes),
        usage_limit=usage_limit,
        customer_usage_limit=customer_usage_limit,
        applicable_to_products=applicable_to_products,
        applicable_to_categories=applicable_to_categories,
        is_active=True,
    )


def weekend_special(
    store_id: int,
    name: str,
    description: str,
    discount_value: Decimal,
    codes: List[str],
    *,
    active_time_start: Optional[str] = None,
    active_time_end: Optional[str] = None,
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
    usage_limit: Optional[int] = None,
    customer_usage_limit: Optional[int] = None,
    applicable_to_products: Optional[List[str]] = None,
    applicable_to_categories: Optional[List[str]] = None,
    now: Optional[datetime] = None,
) -> TimeBasedPromotion:
    """Скидка по субботам и воскресеньям, по умолчанию с 10:00 до 22:00"""
    start, end = _window(start_date, end_date, now)
    return TimeBasedPromotion(
        store_id=store_id,
        name=name,
        description=description,
        discount_value=discount_value,
        time_based_type=TimeBasedType.WEEKLY,
        active_days=list(WEEKEND_DAYS),
        active_time_start=active_time_start or settings.WEEKEND_ACTIVE_TIME_START,
        active_time_end=active_time_end or settings.WEEKEND_ACTIVE_TIME_END,
        start_date=start,
        end_date=end,
        discount_codes=_codes(codes),
        usage_limit=usage_limit,
        customer_usage_limit=customer_usage_limit,
        applicable_to_products=applicable_to_products,
        applicable_to_categories=applicable_to_categories,
        is_active=True,
    )
