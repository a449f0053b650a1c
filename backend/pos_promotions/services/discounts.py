"""
Расчёт скидок по акциям.

Чистые функции без I/O: на вход определение акции, строки корзины,
сумма заказа и текущее время (передаётся вызывающим, в часах магазина).
Нарушение бизнес-правил возвращается как DiscountResult(valid=False),
а не исключением.
"""
import logging
from datetime import datetime
from decimal import Decimal
from typing import List, Optional, Sequence

from pos_promotions.models.promotion import PromotionType, GetDiscountType, TimeBasedType
from pos_promotions.schemas.promotion import CartLine, EligibleItem, DiscountResult

logger = logging.getLogger(__name__)

ZERO = Decimal("0")
HUNDRED = Decimal("100")


def _as_decimal(value) -> Decimal:
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def _format_amount(value) -> str:
    """50.00 -> '50', 49.50 -> '49.5'"""
    return format(_as_decimal(value).normalize(), "f")


def _not_applied(message: str) -> DiscountResult:
    return DiscountResult(valid=False, discount_amount=ZERO, eligible_items=[], message=message)


def _on_same_clock(now: datetime, bound: datetime):
    # naive и aware сравниваются как показания часов магазина
    if (now.tzinfo is None) != (bound.tzinfo is None):
        return now.replace(tzinfo=None), bound.replace(tzinfo=None)
    return now, bound


def _within_window(promotion, now: datetime) -> bool:
    current, start = _on_same_clock(now, promotion.start_date)
    if current < start:
        return False
    current, end = _on_same_clock(now, promotion.end_date)
    return current <= end


def _within_time_of_day(promotion, current_time: str) -> bool:
    start = promotion.active_time_start
    end = promotion.active_time_end
    if start and end:
        return start <= current_time <= end
    return True


def is_active(promotion, now: datetime) -> bool:
    """
    Действует ли акция в момент now.
    1. Период действия start_date..end_date (для всех типов)
    2. Для time_based: время суток, дни недели или конкретные даты
    """
    if not _within_window(promotion, now):
        return False

    if promotion.type != PromotionType.TIME_BASED:
        return True

    current_time = now.strftime("%H:%M:%S")
    schedule = promotion.time_based_type

    if schedule == TimeBasedType.DAILY:
        return _within_time_of_day(promotion, current_time)

    if schedule == TimeBasedType.WEEKLY:
        weekday = now.isoweekday() % 7  # 0 = воскресенье
        if weekday not in (promotion.active_days or []):
            return False
        return _within_time_of_day(promotion, current_time)

    if schedule == TimeBasedType.SPECIFIC_DATES:
        if now.date().isoformat() not in (promotion.specific_dates or []):
            return False
        return _within_time_of_day(promotion, current_time)

    logger.warning(
        "Unknown time-based type %r for promotion %s, no schedule applied",
        schedule,
        promotion.id,
    )
    return True


def get_eligible_lines(promotion, lines: Sequence[CartLine]) -> List[CartLine]:
    """Строки корзины, подходящие под товары ИЛИ категории акции"""
    products = promotion.applicable_to_products or []
    categories = promotion.applicable_to_categories or []

    # Без ограничений акция действует на всю корзину
    if not products and not categories:
        return list(lines)

    return [
        line for line in lines
        if line.product_id in products
        or (line.category_id is not None and line.category_id in categories)
    ]


def _check_purchase(promotion, eligible: List[CartLine], order_total) -> Optional[DiscountResult]:
    if not eligible:
        return _not_applied("No eligible items for this promotion")

    minimum = promotion.minimum_purchase
    if minimum and _as_decimal(order_total) < minimum:
        return _not_applied(f"Minimum purchase of ${_format_amount(minimum)} required")

    return None


def evaluate_percentage(promotion, lines: Sequence[CartLine], order_total) -> DiscountResult:
    """Процент от каждой подходящей строки, с ограничением maximum_discount"""
    eligible = get_eligible_lines(promotion, lines)
    rejected = _check_purchase(promotion, eligible, order_total)
    if rejected:
        return rejected

    percent = _as_decimal(promotion.discount_value)
    total_discount = ZERO
    items = []

    for line in eligible:
        line_discount = line.line_total * percent / HUNDRED
        total_discount += line_discount
        items.append(EligibleItem(
            product_id=line.product_id,
            quantity=line.quantity,
            discount_per_item=line_discount / line.quantity,
            total_discount=line_discount,
        ))

    cap = promotion.maximum_discount
    if cap and total_discount > cap:
        cap = _as_decimal(cap)
        ratio = cap / total_discount
        items = [
            item.model_copy(update={
                "discount_per_item": item.discount_per_item * ratio,
                "total_discount": item.total_discount * ratio,
            })
            for item in items
        ]
        total_discount = cap

    return DiscountResult(
        valid=True,
        discount_amount=total_discount,
        eligible_items=items,
        promotion=promotion,
    )


def evaluate_fixed_amount(promotion, lines: Sequence[CartLine], order_total) -> DiscountResult:
    """Фиксированная сумма, не больше суммы подходящих строк, делится пропорционально"""
    eligible = get_eligible_lines(promotion, lines)
    rejected = _check_purchase(promotion, eligible, order_total)
    if rejected:
        return rejected

    eligible_total = sum((line.line_total for line in eligible), ZERO)
    discount_amount = min(_as_decimal(promotion.discount_value), eligible_total)

    items = []
    for line in eligible:
        if eligible_total:
            line_discount = discount_amount * line.line_total / eligible_total
        else:
            line_discount = ZERO
        items.append(EligibleItem(
            product_id=line.product_id,
            quantity=line.quantity,
            discount_per_item=line_discount / line.quantity,
            total_discount=line_discount,
        ))

    return DiscountResult(
        valid=True,
        discount_amount=discount_amount,
        eligible_items=items,
        promotion=promotion,
    )


def _bogo_unit_discount(promotion, unit_price: Decimal) -> Decimal:
    value = _as_decimal(promotion.get_discount_value or 0)
    kind = promotion.get_discount_type

    if kind == GetDiscountType.FREE:
        return unit_price
    if kind == GetDiscountType.PERCENTAGE:
        return unit_price * value / HUNDRED
    if kind == GetDiscountType.FIXED_AMOUNT:
        # Фикс. сумма за каждую бесплатную единицу, от цены не зависит
        return value
    return ZERO


def evaluate_bogo(promotion, lines: Sequence[CartLine]) -> DiscountResult:
    """Купи X получи Y: считается по каждой строке отдельно"""
    eligible = get_eligible_lines(promotion, lines)
    if not eligible:
        return _not_applied("No eligible items for this promotion")

    buy_quantity = promotion.buy_quantity or 1
    get_quantity = promotion.get_quantity or 1

    total_discount = ZERO
    items = []

    for line in eligible:
        sets = line.quantity // (buy_quantity + get_quantity)
        free_units = sets * get_quantity
        if free_units == 0:
            continue

        unit_discount = _bogo_unit_discount(promotion, line.unit_price)
        line_discount = free_units * unit_discount
        if not line_discount:
            continue

        total_discount += line_discount
        items.append(EligibleItem(
            product_id=line.product_id,
            quantity=free_units,
            discount_per_item=unit_discount,
            total_discount=line_discount,
        ))

    if total_discount == 0:
        return _not_applied(f"Buy {buy_quantity} get {get_quantity} - insufficient quantity")

    return DiscountResult(
        valid=True,
        discount_amount=total_discount,
        eligible_items=items,
        promotion=promotion,
    )


def evaluate(promotion, lines: Sequence[CartLine], order_total, now: datetime) -> DiscountResult:
    """Проверить акцию и рассчитать скидку для корзины"""
    if not is_active(promotion, now):
        result = _not_applied("Promotion is not currently active")
    elif promotion.type in (PromotionType.PERCENTAGE, PromotionType.TIME_BASED):
        result = evaluate_percentage(promotion, lines, order_total)
    elif promotion.type == PromotionType.FIXED_AMOUNT:
        result = evaluate_fixed_amount(promotion, lines, order_total)
    elif promotion.type == PromotionType.BUY_X_GET_Y:
        result = evaluate_bogo(promotion, lines)
    else:
        result = _not_applied("Unknown promotion type")

    logger.debug(
        "Promotion %s (%s) evaluated: valid=%s discount=%s %s",
        promotion.id,
        promotion.type,
        result.valid,
        result.discount_amount,
        result.message or "",
    )
    return result
