from .promotion import (
    PromotionDefinition,
    PromotionVariant,
    PercentagePromotion,
    FixedAmountPromotion,
    BuyXGetYPromotion,
    TimeBasedPromotion,
    CartLine,
    EligibleItem,
    DiscountResult,
)

__all__ = [
    "PromotionDefinition", "PromotionVariant",
    "PercentagePromotion", "FixedAmountPromotion", "BuyXGetYPromotion", "TimeBasedPromotion",
    "CartLine", "EligibleItem", "DiscountResult",
]
