"""
Wishlist Domain Model
"""
from pydantic import BaseModel, Field
from typing import Optional, List, Literal, Callable, Dict
from datetime import datetime, timezone, timedelta

RECENT_DAYS = 7

WishlistSort = Literal["newest", "oldest", "price_low", "price_high", "name"]


class WishlistItem(BaseModel):
    """A saved product; `product` holds the catalog summary when loaded with products"""
    product_id: int
    added_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    product: Optional[dict] = None


class Wishlist(BaseModel):
    user_id: int
    items: List[WishlistItem] = Field(default_factory=list)

    @property
    def item_count(self) -> int:
        return len(self.items)

    def recent_items(self, now: Optional[datetime] = None) -> List[WishlistItem]:
        """Items added within the last seven days"""
        cutoff = (now or datetime.now(timezone.utc)) - timedelta(days=RECENT_DAYS)
        recent = []
        for item in self.items:
            added_at = item.added_at
            if added_at.tzinfo is None:
                added_at = added_at.replace(tzinfo=timezone.utc)
            if added_at >= cutoff:
                recent.append(item)
        return recent

    def filter_by(self, field: str, value: str) -> List[WishlistItem]:
        return [item for item in self.items if item.product and item.product.get(field) == value]

    def in_price_range(self, min_price: float, max_price: float) -> List[WishlistItem]:
        return [
            item for item in self.items
            if item.product and min_price <= item.product["price"] <= max_price
        ]

    def sorted_items(self, sort_by: WishlistSort) -> List[WishlistItem]:
        keys: Dict[str, Callable] = {
            "newest": lambda item: item.added_at,
            "oldest": lambda item: item.added_at,
            "price_low": lambda item: item.product["price"],
            "price_high": lambda item: item.product["price"],
            "name": lambda item: item.product["name"].lower(),
        }
        reverse = sort_by in ("newest", "price_high")
        items = [item for item in self.items if item.product]
        return sorted(items, key=keys[sort_by], reverse=reverse)

    def summary(self) -> dict:
        return {
            "item_count": self.item_count,
            "has_items": self.item_count > 0,
            "recent_items_count": len(self.recent_items()),
        }

    def to_dict(self, items: Optional[List[WishlistItem]] = None) -> dict:
        items = self.items if items is None else items
        return {
            "user_id": self.user_id,
            "items": [item.model_dump(mode="json") for item in items],
            "item_count": len(items),
        }


class WishlistAdd(BaseModel):
    product_id: int


class MoveToCart(BaseModel):
    product_id: int
    quantity: int = Field(1, ge=1, le=100)
