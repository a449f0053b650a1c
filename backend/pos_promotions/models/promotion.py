from sqlmodel import SQLModel, Field, Relationship
from sqlalchemy import Column, DateTime, JSON, UniqueConstraint
from typing import Optional, List
from datetime import datetime, time
from decimal import Decimal
from enum import Enum


def naive_datetime_column(nullable: bool = False) -> Column:
    """Дата без часового пояса: храним местное время магазина"""
    return Column(DateTime(timezone=False), nullable=nullable)


class PromotionType(str, Enum):
    PERCENTAGE = "percentage"
    FIXED_AMOUNT = "fixed_amount"
    BUY_X_GET_Y = "buy_x_get_y"
    TIME_BASED = "time_based"


class GetDiscountType(str, Enum):
    FREE = "free"
    PERCENTAGE = "percentage"
    FIXED_AMOUNT = "fixed_amount"


class TimeBasedType(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    SPECIFIC_DATES = "specific_dates"


class Promotion(SQLModel, table=True):
    __tablename__ = "promotions"

    id: Optional[int] = Field(default=None, primary_key=True)
    store_id: int = Field(index=True)
    name: str
    description: Optional[str] = None

    type: PromotionType
    # Процент (0-100) или фикс. сумма; для buy_x_get_y всегда 0
    discount_value: Decimal = Field(default=Decimal("0"), max_digits=10, decimal_places=2)
    minimum_purchase: Optional[Decimal] = Field(default=None, max_digits=10, decimal_places=2)
    maximum_discount: Optional[Decimal] = Field(default=None, max_digits=10, decimal_places=2)

    # buy_x_get_y
    buy_quantity: Optional[int] = None
    get_quantity: Optional[int] = None
    get_discount_type: Optional[GetDiscountType] = None
    get_discount_value: Optional[Decimal] = Field(default=None, max_digits=10, decimal_places=2)

    # time_based
    time_based_type: Optional[TimeBasedType] = None
    active_time_start: Optional[time] = None
    active_time_end: Optional[time] = None
    active_days: Optional[List[int]] = Field(default=None, sa_column=Column(JSON))
    specific_dates: Optional[List[str]] = Field(default=None, sa_column=Column(JSON))

    start_date: datetime = Field(sa_column=naive_datetime_column())
    end_date: datetime = Field(sa_column=naive_datetime_column())

    usage_limit: Optional[int] = None
    usage_count: int = Field(default=0)
    customer_usage_limit: Optional[int] = None

    # JSON arrays of ids
    applicable_to_products: Optional[List[str]] = Field(default=None, sa_column=Column(JSON))
    applicable_to_categories: Optional[List[str]] = Field(default=None, sa_column=Column(JSON))

    is_active: bool = Field(default=True)

    created_at: datetime = Field(default_factory=datetime.utcnow, sa_column=naive_datetime_column())
    updated_at: datetime = Field(default_factory=datetime.utcnow, sa_column=naive_datetime_column())
    deleted_at: Optional[datetime] = Field(default=None, sa_column=naive_datetime_column(nullable=True))

    # Relationships
    codes: List["DiscountCode"] = Relationship(back_populates="promotion")
    usages: List["PromotionUsage"] = Relationship(back_populates="promotion")


class DiscountCode(SQLModel, table=True):
    __tablename__ = "discount_codes"
    __table_args__ = (UniqueConstraint("promotion_id", "code"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    promotion_id: int = Field(foreign_key="promotions.id", index=True)
    code: str = Field(index=True)
    is_active: bool = Field(default=True)

    created_at: datetime = Field(default_factory=datetime.utcnow, sa_column=naive_datetime_column())

    promotion: Optional[Promotion] = Relationship(back_populates="codes")


class PromotionUsage(SQLModel, table=True):
    __tablename__ = "promotion_usage"

    id: Optional[int] = Field(default=None, primary_key=True)
    promotion_id: int = Field(foreign_key="promotions.id", index=True)
    customer_id: Optional[str] = Field(default=None, index=True)
    order_id: str = Field(index=True)
    discount_amount: Decimal = Field(max_digits=10, decimal_places=2)

    used_at: datetime = Field(default_factory=datetime.utcnow, sa_column=naive_datetime_column())

    promotion: Optional[Promotion] = Relationship(back_populates="usages")
