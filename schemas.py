# ===============================================================
# schemas.py: request/response bodies (camelCase on the wire)
# ===============================================================
from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


PrizeType = Literal["free_gold", "free_silver", "combo", "discount"]
ProductCategory = Literal["gold", "silver", "jewelry"]
OrderStatus = Literal["pending", "paid", "completed", "cancelled"]
SupportRequestType = Literal["customization", "inquiry"]
SupportRequestStatus = Literal["pending", "contacted", "completed", "cancelled"]


# --- Outputs ---

class UserOut(CamelModel):
    id: str
    email: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    profile_image_url: Optional[str] = None
    is_admin: bool = False
    spins_remaining: int = 0
    total_spins_used: int = 0
    created_at: Optional[datetime] = None


class PrizeOut(CamelModel):
    id: int
    name: str
    description: Optional[str] = None
    type: str
    value: float
    gold_grams: float = 0
    silver_grams: float = 0
    probability: float
    is_active: bool
    color: Optional[str] = None


class CouponOut(CamelModel):
    id: int
    code: str
    user_id: str
    prize_id: int
    value: float
    gold_grams: float = 0
    silver_grams: float = 0
    is_redeemed: bool
    redeemed_at: Optional[datetime] = None
    expires_at: Optional[datetime] = None
    created_at: Optional[datetime] = None


class SpinOut(CamelModel):
    prize: PrizeOut
    coupon: CouponOut


class BuySpinsOut(CamelModel):
    spins_added: int
    new_spin_count: int


class WheelSpinOut(CamelModel):
    id: int
    user_id: str
    prize_id: int
    coupon_id: Optional[int] = None
    created_at: Optional[datetime] = None


class WheelConfigOut(CamelModel):
    id: int
    entry_price: float
    spins_per_entry: int
    is_active: bool
    updated_at: Optional[datetime] = None


class ProductOut(CamelModel):
    id: int
    name: str
    description: Optional[str] = None
    category: str
    price_per_gram: float
    weight_grams: float
    total_price: float
    image_url: Optional[str] = None
    in_stock: bool


class OrderOut(CamelModel):
    id: int
    user_id: str
    product_id: int
    coupon_id: Optional[int] = None
    original_price: float
    discount_amount: float
    final_price: float
    status: str
    created_at: Optional[datetime] = None


class SupportRequestOut(CamelModel):
    id: int
    user_id: str
    type: str
    image_url: Optional[str] = None
    description: Optional[str] = None
    gold_weight_estimate: Optional[float] = None
    contact_phone: Optional[str] = None
    status: str
    admin_notes: Optional[str] = None
    created_at: Optional[datetime] = None


class LoginOut(CamelModel):
    user: UserOut
    token: str


# --- Inputs ---

class LoginIn(CamelModel):
    email: str = Field(min_length=3, max_length=255)
    password: str = Field(min_length=1)


class OrderIn(CamelModel):
    product_id: int
    coupon_id: Optional[int] = None


class PrizeIn(CamelModel):
    name: str = Field(min_length=1, max_length=255)
    description: Optional[str] = None
    type: PrizeType
    value: float = Field(ge=0)
    gold_grams: float = Field(default=0, ge=0)
    silver_grams: float = Field(default=0, ge=0)
    probability: float = Field(default=10, ge=0, le=100)
    is_active: bool = True
    color: Optional[str] = Field(default="#DC2626", max_length=20)


class PrizeUpdate(CamelModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = None
    type: Optional[PrizeType] = None
    value: Optional[float] = Field(default=None, ge=0)
    gold_grams: Optional[float] = Field(default=None, ge=0)
    silver_grams: Optional[float] = Field(default=None, ge=0)
    probability: Optional[float] = Field(default=None, ge=0, le=100)
    is_active: Optional[bool] = None
    color: Optional[str] = Field(default=None, max_length=20)


class ProductIn(CamelModel):
    name: str = Field(min_length=1, max_length=255)
    description: Optional[str] = None
    category: ProductCategory
    price_per_gram: float = Field(gt=0)
    weight_grams: float = Field(gt=0)
    total_price: Optional[float] = Field(default=None, ge=0)
    image_url: Optional[str] = None
    in_stock: bool = True


class ProductUpdate(CamelModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = None
    category: Optional[ProductCategory] = None
    price_per_gram: Optional[float] = Field(default=None, gt=0)
    weight_grams: Optional[float] = Field(default=None, gt=0)
    total_price: Optional[float] = Field(default=None, ge=0)
    image_url: Optional[str] = None
    in_stock: Optional[bool] = None


class OrderStatusIn(CamelModel):
    status: OrderStatus


class WheelConfigIn(CamelModel):
    entry_price: Optional[float] = Field(default=None, ge=0)
    spins_per_entry: Optional[int] = Field(default=None, ge=1)
    is_active: Optional[bool] = None


class SupportRequestIn(CamelModel):
    type: SupportRequestType
    image_url: Optional[str] = None
    description: Optional[str] = None
    gold_weight_estimate: Optional[float] = Field(default=None, ge=0)
    contact_phone: Optional[str] = Field(default=None, max_length=20)


class SupportRequestStatusIn(CamelModel):
    status: SupportRequestStatus
    admin_notes: Optional[str] = None
