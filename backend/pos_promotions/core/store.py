"""
Часы магазина и нормализация промокодов.

Все даты акций хранятся и сравниваются по местному времени магазина
(naive datetime в STORE_TIMEZONE).
"""
from datetime import datetime
from typing import Optional
from zoneinfo import ZoneInfo

from pos_promotions.core.config import settings


def normalize_code(code: str) -> str:
    return code.strip().upper()


def store_now(tz_name: Optional[str] = None) -> datetime:
    """Текущее время по часам магазина (naive)"""
    return datetime.now(ZoneInfo(tz_name or settings.STORE_TIMEZONE)).replace(tzinfo=None)


def to_store_clock(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value
    return value.astimezone(ZoneInfo(settings.STORE_TIMEZONE)).replace(tzinfo=None)
