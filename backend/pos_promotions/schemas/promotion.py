from pydantic import BaseModel, Field, TypeAdapter, field_validator, model_validator
from typing import Optional, List, Literal, Union, Annotated
from datetime import datetime, date, time
from decimal import Decimal
from pos_promotions.models.promotion import GetDiscountType, TimeBasedType


# Фиксированная ширина: строки HH:MM:SS сравниваются лексикографически
TIME_OF_DAY_PATTERN = r"^([01]\d|2[0-3]):[0-5]\d:[0-5]\d$"
DATE_PATTERN = r"^\d{4}-\d{2}-\d{2}$"

Weekday = Annotated[int, Field(ge=0, le=6)]  # 0 = воскресенье
IsoDate = Annotated[str, Field(pattern=DATE_PATTERN)]


def _window_is_ordered(start: datetime, end: datetime) -> bool:
    if (start.tzinfo is None) != (end.tzinfo is None):
        start, end = start.replace(tzinfo=None), end.replace(tzinfo=None)
    return start <= end


# === Promotion definitions ===

class PromotionBase(BaseModel):
    """Общие поля акции любого типа"""
    id: Optional[int] = None
    store_id: int
    name: str
    description: Optional[str] = None

    minimum_purchase: Optional[Decimal] = Field(default=None, ge=0)

    start_date: datetime
    end_date: datetime

    usage_limit: Optional[int] = Field(default=None, ge=1)
    usage_count: int = Field(default=0, ge=0)
    customer_usage_limit: Optional[int] = Field(default=None, ge=1)

    applicable_to_products: Optional[List[str]] = None
    applicable_to_categories: Optional[List[str]] = None

    is_active: bool = True
    discount_codes: List[str] = Field(default_factory=list)

    class Config:
        from_attributes = True
        frozen = True
        extra = "forbid"

    @model_validator(mode="after")
    def check_window(self):
        if not _window_is_ordered(self.start_date, self.end_date):
            raise ValueError("end_date must not be earlier than start_date")
        return self


class PercentagePromotion(PromotionBase):
    type: Literal["percentage"] = "percentage"
    discount_value: Decimal = Field(ge=0, le=100)
    maximum_discount: Optional[Decimal] = Field(default=None, ge=0)


class FixedAmountPromotion(PromotionBase):
    type: Literal["fixed_amount"] = "fixed_amount"
    discount_value: Decimal = Field(ge=0)


class BuyXGetYPromotion(PromotionBase):
    type: Literal["buy_x_get_y"] = "buy_x_get_y"
    discount_value: Decimal = Decimal("0")  # не используется

    buy_quantity: int = Field(default=1, ge=1)
    get_quantity: int = Field(default=1, ge=1)
    get_discount_type: GetDiscountType
    get_discount_value: Optional[Decimal] = Field(default=None, ge=0)

    @field_validator("discount_value")
    @classmethod
    def discount_value_unused(cls, value: Decimal) -> Decimal:
        if value != 0:
            raise ValueError("discount_value must be 0 for buy_x_get_y promotions")
        return value

    @model_validator(mode="after")
    def check_get_discount_value(self):
        if self.get_discount_type != GetDiscountType.FREE and self.get_discount_value is None:
            raise ValueError("get_discount_value is required unless get_discount_type is 'free'")
        return self


class TimeBasedPromotion(PromotionBase):
    type: Literal["time_based"] = "time_based"
    discount_value: Decimal = Field(ge=0, le=100)
    maximum_discount: Optional[Decimal] = Field(default=None, ge=0)

    time_based_type: TimeBasedType
    active_time_start: Optional[str] = Field(default=None, pattern=TIME_OF_DAY_PATTERN)
    active_time_end: Optional[str] = Field(default=None, pattern=TIME_OF_DAY_PATTERN)
    active_days: Optional[List[Weekday]] = None
    specific_dates: Optional[List[IsoDate]] = None

    @field_validator("active_time_start", "active_time_end", mode="before")
    @classmethod
    def format_time_of_day(cls, value):
        # Колонка time в БД отдаёт datetime.time
        if isinstance(value, time):
            return value.strftime("%H:%M:%S")
        return value

    @field_validator("specific_dates", mode="before")
    @classmethod
    def format_dates(cls, value):
        if value is None:
            return value
        return [d.isoformat() if isinstance(d, date) else d for d in value]

    @model_validator(mode="after")
    def check_schedule(self):
        if self.time_based_type == TimeBasedType.WEEKLY and not self.active_days:
            raise ValueError("active_days is required for weekly promotions")
        if self.time_based_type == TimeBasedType.SPECIFIC_DATES and not self.specific_dates:
            raise ValueError("specific_dates is required for specific_dates promotions")
        return self


PromotionVariant = Union[PercentagePromotion, FixedAmountPromotion, BuyXGetYPromotion, TimeBasedPromotion]

PromotionDefinition = Annotated[PromotionVariant, Field(discriminator="type")]

promotion_adapter = TypeAdapter(PromotionDefinition)


# === Engine input / output ===

class CartLine(BaseModel):
    product_id: str
    category_id: Optional[str] = None
    quantity: int = Field(gt=0)
    unit_price: Decimal = Field(ge=0)

    class Config:
        frozen = True

    @property
    def line_total(self) -> Decimal:
        return self.unit_price * self.quantity


class EligibleItem(BaseModel):
    product_id: str
    quantity: int
    discount_per_item: Decimal
    total_discount: Decimal


class DiscountResult(BaseModel):
    valid: bool
    discount_amount: Decimal = Decimal("0")
    eligible_items: List[EligibleItem] = Field(default_factory=list)
    message: Optional[str] = None
    promotion: Optional[PromotionDefinition] = None


# === API ===

class PromotionUpdate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    discount_value: Optional[Decimal] = Field(default=None, ge=0)
    minimum_purchase: Optional[Decimal] = Field(default=None, ge=0)
    maximum_discount: Optional[Decimal] = Field(default=None, ge=0)
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    usage_limit: Optional[int] = Field(default=None, ge=1)
    customer_usage_limit: Optional[int] = Field(default=None, ge=1)
    applicable_to_products: Optional[List[str]] = None
    applicable_to_categories: Optional[List[str]] = None
    is_active: Optional[bool] = None
    discount_codes: Optional[List[str]] = None


class ValidateCodeRequest(BaseModel):
    code: str
    store_id: int
    customer_id: Optional[str] = None
    items: List[CartLine] = Field(min_length=1)
    # Если не передан, берётся сумма строк корзины
    order_total: Optional[Decimal] = Field(default=None, ge=0)

    @property
    def cart_total(self) -> Decimal:
        if self.order_total is not None:
            return self.order_total
        return sum((line.line_total for line in self.items), Decimal("0"))


class ValidateCodeResponse(DiscountResult):
    discount_code: str


class RedeemRequest(BaseModel):
    order_id: str
    discount_amount: Decimal = Field(ge=0)
    customer_id: Optional[str] = None


class PromotionUsageResponse(BaseModel):
    id: int
    promotion_id: int
    customer_id: Optional[str] = None
    order_id: str
    discount_amount: Decimal
    used_at: datetime

    class Config:
        from_attributes = True


class PromotionStats(BaseModel):
    promotion_id: int
    total_usage: int
    total_discount: Decimal
    unique_customers: int
    remaining_usage: Optional[int] = None
