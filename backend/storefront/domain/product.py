"""
Product Domain Model

Represents a product in the Taksha catalog, together with its reviews
and stock counters.

Author: Taksha Engineering
Date: 2025-10-17
"""
import time
from pydantic import BaseModel, Field, ConfigDict
from typing import Optional, List, Dict, Literal
from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP

from storefront.core.exceptions import InsufficientStockError, ValidationError
from storefront.domain.constants import ProductCategory, ProductSeries, slugify


class ProductImage(BaseModel):
    url: str
    alt: Optional[str] = None
    is_main: bool = False


class Dimensions(BaseModel):
    length: Optional[float] = None
    width: Optional[float] = None
    height: Optional[float] = None
    unit: Literal["cm", "inch", "mm"] = "cm"


class Stock(BaseModel):
    quantity: int = Field(0, ge=0)
    reserved: int = Field(0, ge=0)
    threshold: int = Field(5, ge=0)


class Rating(BaseModel):
    average: float = Field(0, ge=0, le=5)
    count: int = 0


class DeliveryTime(BaseModel):
    min: int = 5
    max: int = 7


class ShippingInfo(BaseModel):
    weight: float = 0
    free_shipping: bool = False
    shipping_cost: float = 0
    processing_time: int = 2
    delivery_time: DeliveryTime = Field(default_factory=DeliveryTime)


class Seo(BaseModel):
    slug: Optional[str] = None
    title: Optional[str] = None
    description: Optional[str] = None
    keywords: List[str] = Field(default_factory=list)


class Review(BaseModel):
    """A customer review (one per user and product)"""
    id: Optional[int] = None
    product_id: Optional[int] = None
    user_id: int
    name: str
    rating: int = Field(..., ge=1, le=5)
    comment: str
    is_verified: bool = False
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


def calculate_rating(ratings: List[int]) -> Rating:
    """Average of review ratings rounded to one decimal"""
    if not ratings:
        return Rating(average=0, count=0)
    average = Decimal(sum(ratings)) / Decimal(len(ratings))
    return Rating(
        average=float(average.quantize(Decimal("0.1"), rounding=ROUND_HALF_UP)),
        count=len(ratings),
    )


def generate_sku(category: str, series: str, now: Optional[float] = None) -> str:
    """
    SKU = first three letters of the category, first three letters of the
    series without spaces, last six digits of the millisecond timestamp.

    >>> generate_sku("home", "Ark Series", now=1700000123.0)
    'HOMARK123000'
    """
    timestamp = str(int((now if now is not None else time.time()) * 1000))
    category_code = category[:3].upper()
    series_code = series.replace(" ", "")[:3].upper()
    return f"{category_code}{series_code}{timestamp[-6:]}"


class Product(BaseModel):
    """
    Product domain model - represents a product in our catalog

    Fields:
        id: Internal product ID
        name / description: Display copy
        category / series: Catalog classification
        price / original_price: Selling price and list price (for discounts)
        images: Gallery, at most one flagged main
        stock: quantity on hand, quantity reserved by unpaid orders, low-stock threshold
        sku: Unique stock keeping unit
        rating: Aggregate of approved reviews
        sales_count / view_count / wishlist_count: Engagement counters
        seo: Slug and metadata
    """

    id: int = Field(..., description="Internal product ID")
    name: str
    description: str = ""
    category: ProductCategory
    series: ProductSeries
    price: Decimal = Field(..., ge=0)
    original_price: Optional[Decimal] = Field(None, ge=0)
    currency: str = "INR"

    images: List[ProductImage] = Field(default_factory=list)
    features: List[str] = Field(default_factory=list)
    specifications: Dict[str, str] = Field(default_factory=dict)
    dimensions: Optional[Dimensions] = None
    materials: List[str] = Field(default_factory=list)
    colors: List[str] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list)

    stock: Stock = Field(default_factory=Stock)
    sku: str

    is_new: bool = False
    is_limited: bool = False
    is_featured: bool = False
    is_active: bool = True

    rating: Rating = Field(default_factory=Rating)
    sales_count: int = 0
    view_count: int = 0
    wishlist_count: int = 0

    shipping: ShippingInfo = Field(default_factory=ShippingInfo)
    seo: Seo = Field(default_factory=Seo)

    created_by: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

    # Computed properties
    @property
    def main_image(self) -> Optional[str]:
        """URL of the image flagged main, else the first image"""
        for image in self.images:
            if image.is_main:
                return image.url
        return self.images[0].url if self.images else None

    @property
    def discount_percentage(self) -> int:
        if not self.original_price or self.original_price <= self.price:
            return 0
        ratio = (self.original_price - self.price) / self.original_price * 100
        return int(ratio.quantize(Decimal("1"), rounding=ROUND_HALF_UP))

    @property
    def stock_status(self) -> str:
        if self.stock.quantity == 0:
            return "out_of_stock"
        if self.stock.quantity <= self.stock.threshold:
            return "low_stock"
        return "in_stock"

    @property
    def available_stock(self) -> int:
        return max(0, self.stock.quantity - self.stock.reserved)

    def ensure_available(self, quantity: int) -> None:
        """Raise InsufficientStockError if `quantity` cannot be reserved"""
        if self.available_stock < quantity:
            raise InsufficientStockError(
                available=self.available_stock,
                requested=quantity,
                product_name=self.name,
            )

    def ensure_purchasable(self) -> None:
        if not self.is_active:
            raise ValidationError(f"Product {self.name} is not available")

    def to_dict(self) -> dict:
        """
        Convert to dictionary with computed fields

        Returns dict with all fields plus computed properties
        """
        data = self.model_dump(mode="json")

        data['main_image'] = self.main_image
        data['discount_percentage'] = self.discount_percentage
        data['stock_status'] = self.stock_status
        data['available_stock'] = self.available_stock

        # Decimal to float for JSON compatibility
        data['price'] = float(self.price)
        if self.original_price is not None:
            data['original_price'] = float(self.original_price)

        return data

    def to_summary(self) -> dict:
        """Compact form embedded in carts, wishlists and order lists"""
        return {
            "id": self.id,
            "name": self.name,
            "price": float(self.price),
            "original_price": float(self.original_price) if self.original_price is not None else None,
            "main_image": self.main_image,
            "category": self.category,
            "series": self.series,
            "sku": self.sku,
            "slug": self.seo.slug,
            "stock_status": self.stock_status,
            "available_stock": self.available_stock,
            "is_active": self.is_active,
            "rating": self.rating.model_dump(),
        }


class ProductCreate(BaseModel):
    """Schema for creating a new product"""
    name: str = Field(..., min_length=2, max_length=200)
    description: str = Field(..., min_length=10, max_length=2000)
    category: ProductCategory
    series: ProductSeries
    price: Decimal = Field(..., ge=0)
    original_price: Optional[Decimal] = Field(None, ge=0)
    currency: str = "INR"
    images: List[ProductImage] = Field(default_factory=list)
    features: List[str] = Field(default_factory=list)
    specifications: Dict[str, str] = Field(default_factory=dict)
    dimensions: Optional[Dimensions] = None
    materials: List[str] = Field(default_factory=list)
    colors: List[str] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list)
    stock: Stock = Field(default_factory=Stock)
    sku: Optional[str] = None
    is_new: bool = False
    is_limited: bool = False
    is_featured: bool = False
    shipping: ShippingInfo = Field(default_factory=ShippingInfo)
    seo: Seo = Field(default_factory=Seo)

    def prepare(self) -> "ProductCreate":
        """Fill generated values: SKU, slug and main image"""
        if not self.sku:
            self.sku = generate_sku(self.category, self.series)
        if not self.seo.slug:
            self.seo.slug = slugify(self.name)
        if self.images and not any(image.is_main for image in self.images):
            self.images[0].is_main = True
        return self


class ProductUpdate(BaseModel):
    """Schema for updating an existing product"""
    name: Optional[str] = Field(None, min_length=2, max_length=200)
    description: Optional[str] = Field(None, min_length=10, max_length=2000)
    category: Optional[ProductCategory] = None
    series: Optional[ProductSeries] = None
    price: Optional[Decimal] = Field(None, ge=0)
    original_price: Optional[Decimal] = Field(None, ge=0)
    images: Optional[List[ProductImage]] = None
    features: Optional[List[str]] = None
    specifications: Optional[Dict[str, str]] = None
    dimensions: Optional[Dimensions] = None
    materials: Optional[List[str]] = None
    colors: Optional[List[str]] = None
    tags: Optional[List[str]] = None
    stock: Optional[Stock] = None
    is_new: Optional[bool] = None
    is_limited: Optional[bool] = None
    is_featured: Optional[bool] = None
    is_active: Optional[bool] = None
    shipping: Optional[ShippingInfo] = None
    seo: Optional[Seo] = None


class ReviewCreate(BaseModel):
    rating: int = Field(..., ge=1, le=5)
    comment: str = Field(..., min_length=5, max_length=500)


class StockUpdate(BaseModel):
    quantity: int = Field(..., ge=0)
    reserved: Optional[int] = Field(None, ge=0)
