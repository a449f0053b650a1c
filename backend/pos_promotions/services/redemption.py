"""
Промокоды и учёт использования акций.

Поиск акции по коду, проверка лимитов, атомарное списание использования
и статистика. Сам расчёт скидки делает services.discounts.
"""
import logging
from datetime import datetime, time
from decimal import Decimal
from typing import List, Optional

from pydantic import ValidationError
from sqlalchemy import delete, update, or_, func
from sqlmodel import Session, select, col

from pos_promotions.core.store import normalize_code, store_now, to_store_clock
from pos_promotions.core.exceptions import NotFoundException, BadRequestException, ConflictException
from pos_promotions.models.promotion import Promotion, DiscountCode, PromotionUsage, PromotionType
from pos_promotions.schemas.promotion import (
    PromotionDefinition,
    PromotionUpdate,
    ValidateCodeRequest,
    ValidateCodeResponse,
    PromotionStats,
    promotion_adapter,
)
from pos_promotions.services import discounts

logger = logging.getLogger(__name__)


# === Record <-> definition ===

def to_definition(promotion: Promotion) -> PromotionDefinition:
    """Собрать типизированное определение акции из строки таблицы"""
    data = promotion.model_dump(
        exclude={"created_at", "updated_at", "deleted_at"},
        exclude_none=True,
    )
    data["type"] = PromotionType(promotion.type).value
    data["discount_codes"] = [code.code for code in promotion.codes if code.is_active]
    return promotion_adapter.validate_python(data)


def from_definition(definition: PromotionDefinition) -> Promotion:
    data = definition.model_dump(exclude={"id", "discount_codes", "usage_count"})
    data["type"] = PromotionType(definition.type)
    data["start_date"] = to_store_clock(data["start_date"])
    data["end_date"] = to_store_clock(data["end_date"])
    for key in ("active_time_start", "active_time_end"):
        if data.get(key):
            data[key] = time.fromisoformat(data[key])
    return Promotion(**data)


# === Codes ===

def _ensure_codes_available(
    db: Session,
    store_id: int,
    codes: List[str],
    exclude_promotion_id: Optional[int] = None,
) -> None:
    if len(set(codes)) != len(codes):
        raise BadRequestException("Duplicate discount codes")
    if not codes:
        return

    stmt = (
        select(DiscountCode.code)
        .join(Promotion, DiscountCode.promotion_id == Promotion.id)
        .where(
            Promotion.store_id == store_id,
            Promotion.deleted_at == None,
            col(DiscountCode.code).in_(codes),
        )
    )
    if exclude_promotion_id is not None:
        stmt = stmt.where(Promotion.id != exclude_promotion_id)

    taken = db.exec(stmt).all()
    if taken:
        raise BadRequestException(f"Discount code already exists: {', '.join(sorted(taken))}")


def get_promotion_by_code(db: Session, code: str, store_id: int) -> Optional[Promotion]:
    """Активная, не удалённая акция магазина по активному коду"""
    stmt = (
        select(Promotion)
        .join(DiscountCode, DiscountCode.promotion_id == Promotion.id)
        .where(
            DiscountCode.code == normalize_code(code),
            DiscountCode.is_active == True,
            Promotion.store_id == store_id,
            Promotion.is_active == True,
            Promotion.deleted_at == None,
        )
    )
    return db.exec(stmt).first()


# === CRUD ===

def get_promotion(db: Session, promotion_id: int) -> Promotion:
    promotion = db.get(Promotion, promotion_id)
    if not promotion or promotion.deleted_at is not None:
        raise NotFoundException("Promotion not found")
    return promotion


def list_promotions(db: Session, store_id: int, skip: int = 0, limit: int = 50) -> List[Promotion]:
    stmt = (
        select(Promotion)
        .where(Promotion.store_id == store_id, Promotion.deleted_at == None)
        .order_by(col(Promotion.id).desc())
        .offset(skip)
        .limit(limit)
    )
    return list(db.exec(stmt).all())


def list_active_promotions(db: Session, store_id: int, now: Optional[datetime] = None) -> List[PromotionDefinition]:
    """Акции магазина, действующие прямо сейчас (с учётом расписания)"""
    now = now or store_now()
    stmt = select(Promotion).where(
        Promotion.store_id == store_id,
        Promotion.is_active == True,
        Promotion.deleted_at == None,
        Promotion.start_date <= now,
        Promotion.end_date >= now,
    )
    definitions = [to_definition(promotion) for promotion in db.exec(stmt).all()]
    return [definition for definition in definitions if discounts.is_active(definition, now)]


def create_promotion(db: Session, definition: PromotionDefinition) -> Promotion:
    codes = [normalize_code(code) for code in definition.discount_codes]
    _ensure_codes_available(db, definition.store_id, codes)

    promotion = from_definition(definition)
    db.add(promotion)
    # id нужен для кодов; акция и коды сохраняются одной транзакцией
    db.flush()

    for code in codes:
        db.add(DiscountCode(promotion_id=promotion.id, code=code))

    db.commit()
    db.refresh(promotion)

    logger.info("Promotion %s created for store %s", promotion.id, promotion.store_id)
    return promotion


def update_promotion(db: Session, promotion_id: int, data: PromotionUpdate) -> Promotion:
    promotion = get_promotion(db, promotion_id)

    update_data = data.model_dump(exclude_unset=True)
    codes = update_data.pop("discount_codes", None)

    for key, value in update_data.items():
        if isinstance(value, datetime):
            value = to_store_clock(value)
        setattr(promotion, key, value)
    promotion.updated_at = datetime.utcnow()

    # Поля другого типа акции или сломанное окно действия не сохраняем
    try:
        to_definition(promotion)
    except ValidationError as exc:
        db.rollback()
        raise BadRequestException(exc.errors()[0]["msg"])

    if codes is not None:
        codes = [normalize_code(code) for code in codes]
        _ensure_codes_available(db, promotion.store_id, codes, exclude_promotion_id=promotion.id)
        # unique (promotion_id, code): старые коды удаляются до вставки новых
        old_codes = list(promotion.codes)
        db.connection().execute(delete(DiscountCode).where(DiscountCode.promotion_id == promotion.id))
        for existing in old_codes:
            db.expunge(existing)
        db.expire(promotion, ["codes"])
        for code in codes:
            db.add(DiscountCode(promotion_id=promotion.id, code=code))

    db.add(promotion)
    db.commit()
    db.refresh(promotion)
    return promotion


def delete_promotion(db: Session, promotion_id: int) -> None:
    """Мягкое удаление: история использования сохраняется"""
    promotion = get_promotion(db, promotion_id)
    promotion.deleted_at = datetime.utcnow()
    db.add(promotion)
    db.commit()


# === Usage ===

def count_customer_usage(db: Session, promotion_id: int, customer_id: str) -> int:
    stmt = select(func.count()).select_from(PromotionUsage).where(
        PromotionUsage.promotion_id == promotion_id,
        PromotionUsage.customer_id == customer_id,
    )
    return db.exec(stmt).one()


def check_usage_limits(db: Session, promotion: Promotion, customer_id: Optional[str] = None) -> None:
    if promotion.usage_limit is not None and promotion.usage_count >= promotion.usage_limit:
        raise BadRequestException("Promotion usage limit exceeded")

    if customer_id and promotion.customer_usage_limit is not None:
        used = count_customer_usage(db, promotion.id, customer_id)
        if used >= promotion.customer_usage_limit:
            raise BadRequestException("Customer usage limit exceeded for this promotion")


def validate_code(db: Session, data: ValidateCodeRequest, now: Optional[datetime] = None) -> ValidateCodeResponse:
    """Проверить промокод и рассчитать скидку для корзины"""
    now = now or store_now()

    promotion = get_promotion_by_code(db, data.code, data.store_id)
    if not promotion:
        logger.warning(
            "Invalid discount code %s for store %s",
            data.code,
            data.store_id,
            extra={"discount_code": data.code, "store_id": data.store_id},
        )
        raise NotFoundException("Invalid discount code")

    definition = to_definition(promotion)
    if not discounts.is_active(definition, now):
        raise BadRequestException("Promotion is not currently active")

    check_usage_limits(db, promotion, data.customer_id)

    result = discounts.evaluate(definition, data.items, data.cart_total, now)
    if not result.valid:
        raise BadRequestException(result.message)

    return ValidateCodeResponse(
        valid=True,
        discount_amount=result.discount_amount,
        eligible_items=result.eligible_items,
        promotion=result.promotion,
        discount_code=normalize_code(data.code),
    )


def redeem(
    db: Session,
    promotion_id: int,
    order_id: str,
    discount_amount: Decimal,
    customer_id: Optional[str] = None,
) -> PromotionUsage:
    """
    Зафиксировать использование акции заказом.
    Счётчик увеличивается условным UPDATE, поэтому параллельные заказы
    не могут превысить usage_limit.
    """
    promotion = get_promotion(db, promotion_id)

    if customer_id and promotion.customer_usage_limit is not None:
        used = count_customer_usage(db, promotion.id, customer_id)
        if used >= promotion.customer_usage_limit:
            raise BadRequestException("Customer usage limit exceeded for this promotion")

    stmt = (
        update(Promotion)
        .where(
            Promotion.id == promotion_id,
            or_(Promotion.usage_limit == None, Promotion.usage_count < Promotion.usage_limit),
        )
        .values(usage_count=Promotion.usage_count + 1, updated_at=datetime.utcnow())
    )
    result = db.connection().execute(stmt)

    if result.rowcount == 0:
        db.rollback()
        logger.warning(
            "Usage limit reached for promotion %s, order %s rejected",
            promotion_id,
            order_id,
            extra={"promotion_id": promotion_id, "order_id": order_id},
        )
        raise ConflictException("Promotion usage limit exceeded")

    usage = PromotionUsage(
        promotion_id=promotion_id,
        customer_id=customer_id,
        order_id=order_id,
        discount_amount=discount_amount,
    )
    db.add(usage)
    db.commit()
    db.refresh(usage)

    logger.info(
        "Promotion %s redeemed by order %s for %s",
        promotion_id,
        order_id,
        discount_amount,
    )
    return usage


def get_stats(db: Session, promotion_id: int) -> PromotionStats:
    promotion = get_promotion(db, promotion_id)

    stmt = select(
        func.count(PromotionUsage.id),
        func.sum(PromotionUsage.discount_amount),
        func.count(func.distinct(PromotionUsage.customer_id)),
    ).where(PromotionUsage.promotion_id == promotion_id)
    total_usage, total_discount, unique_customers = db.exec(stmt).one()

    remaining = None
    if promotion.usage_limit is not None:
        remaining = max(promotion.usage_limit - promotion.usage_count, 0)

    return PromotionStats(
        promotion_id=promotion_id,
        total_usage=total_usage,
        total_discount=Decimal(str(total_discount or 0)),
        unique_customers=unique_customers,
        remaining_usage=remaining,
    )
