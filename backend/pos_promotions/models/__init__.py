from .promotion import (
    Promotion,
    DiscountCode,
    PromotionUsage,
    PromotionType,
    GetDiscountType,
    TimeBasedType,
)

__all__ = [
    "Promotion", "DiscountCode", "PromotionUsage",
    "PromotionType", "GetDiscountType", "TimeBasedType",
]
