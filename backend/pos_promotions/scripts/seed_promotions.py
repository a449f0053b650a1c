"""
Seed-скрипт: демо-акции магазина из шаблонов, если их ещё нет
Запуск: python -m pos_promotions.scripts.seed_promotions
"""
import logging
from decimal import Decimal

from sqlmodel import SQLModel, Session, select
from pos_promotions.db.session import engine
from pos_promotions.models.promotion import Promotion, GetDiscountType
from pos_promotions.core.config import settings
from pos_promotions.core.logging import setup_logging
from pos_promotions.services import templates
from pos_promotions.services.redemption import create_promotion

logger = logging.getLogger("pos_promotions.scripts.seed_promotions")


def create_tables():
    """Создание всех таблиц"""
    SQLModel.metadata.create_all(engine)


def demo_promotions(store_id: int):
    return [
        templates.percentage_discount(
            store_id, "Spring sale", "20% off, up to $100",
            Decimal("20"), ["SPRING20"],
            minimum_purchase=Decimal("50"), maximum_discount=Decimal("100"),
        ),
        templates.bogo_promotion(
            store_id, "Buy 2 get 1", "Every third item free",
            2, 1, GetDiscountType.FREE, ["B2G1"],
        ),
        templates.happy_hour_promotion(
            store_id, "Happy hour", "15% off from 17:00 to 19:00",
            Decimal("15"), "17:00:00", "19:00:00", ["HAPPY15"],
        ),
        templates.weekend_special(
            store_id, "Weekend special", "10% off on weekends",
            Decimal("10"), ["WEEKEND10"],
        ),
    ]


def seed_promotions():
    """Создание демо-акций если у магазина нет ни одной"""
    store_id = settings.SEED_STORE_ID

    with Session(engine) as session:
        existing = session.exec(select(Promotion).where(Promotion.store_id == store_id)).first()
        if existing:
            logger.info("Store %s already has promotions, skipping seed", store_id)
            return

        for definition in demo_promotions(store_id):
            promotion = create_promotion(session, definition)
            logger.info("Seeded promotion %s: %s", promotion.id, promotion.name)


if __name__ == "__main__":
    setup_logging()
    create_tables()
    seed_promotions()
