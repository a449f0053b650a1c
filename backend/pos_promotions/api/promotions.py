from fastapi import APIRouter, Body, Depends, Query
from sqlmodel import Session
from typing import List
from pos_promotions.api.deps import get_db
from pos_promotions.schemas.promotion import (
    PromotionVariant,
    PromotionUpdate,
    ValidateCodeRequest,
    ValidateCodeResponse,
    RedeemRequest,
    PromotionUsageResponse,
    PromotionStats,
)
from pos_promotions.services import redemption

router = APIRouter(prefix="/api/promotions", tags=["promotions"])


# === Checkout ===

@router.post("/validate-code", response_model=ValidateCodeResponse)
def validate_discount_code(data: ValidateCodeRequest, db: Session = Depends(get_db)):
    """Проверить промокод и рассчитать скидку для корзины"""
    return redemption.validate_code(db, data)


@router.post("/{promotion_id}/redeem", response_model=PromotionUsageResponse, status_code=201)
def redeem_promotion(promotion_id: int, data: RedeemRequest, db: Session = Depends(get_db)):
    """Зафиксировать использование акции после сохранения заказа"""
    return redemption.redeem(
        db,
        promotion_id,
        order_id=data.order_id,
        discount_amount=data.discount_amount,
        customer_id=data.customer_id,
    )


@router.get("/active", response_model=List[PromotionVariant])
def list_active_promotions(store_id: int = Query(...), db: Session = Depends(get_db)):
    """Список действующих сейчас акций магазина"""
    return redemption.list_active_promotions(db, store_id)


# === CRUD ===

@router.get("/", response_model=List[PromotionVariant])
def list_promotions(
    store_id: int = Query(...),
    skip: int = 0,
    limit: int = 50,
    db: Session = Depends(get_db),
):
    """Список акций магазина"""
    promotions = redemption.list_promotions(db, store_id, skip=skip, limit=limit)
    return [redemption.to_definition(promo) for promo in promotions]


@router.get("/{promotion_id}", response_model=PromotionVariant)
def get_promotion(promotion_id: int, db: Session = Depends(get_db)):
    promo = redemption.get_promotion(db, promotion_id)
    return redemption.to_definition(promo)


@router.get("/{promotion_id}/stats", response_model=PromotionStats)
def get_promotion_stats(promotion_id: int, db: Session = Depends(get_db)):
    """Статистика использования акции"""
    return redemption.get_stats(db, promotion_id)


@router.post("/", response_model=PromotionVariant, status_code=201)
def create_promotion(
    data: PromotionVariant = Body(..., discriminator="type"),
    db: Session = Depends(get_db),
):
    """Создать акцию"""
    promo = redemption.create_promotion(db, data)
    return redemption.to_definition(promo)


@router.patch("/{promotion_id}", response_model=PromotionVariant)
def update_promotion(promotion_id: int, data: PromotionUpdate, db: Session = Depends(get_db)):
    """Обновить акцию"""
    promo = redemption.update_promotion(db, promotion_id, data)
    return redemption.to_definition(promo)


@router.delete("/{promotion_id}")
def delete_promotion(promotion_id: int, db: Session = Depends(get_db)):
    """Удалить акцию (мягко)"""
    redemption.delete_promotion(db, promotion_id)
    return {"message": "Promotion deleted"}
