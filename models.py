#=================================================================
# models.py (users, wheel prizes, coupons, catalog, orders)
#=================================================================
from datetime import datetime, timezone
from sqlalchemy import (
    Column, String, Integer, Float, ForeignKey, Text, CheckConstraint,
    Boolean, DateTime, Index
)
from sqlalchemy.orm import relationship
from base import Base  # from base.py


def utcnow() -> datetime:
    """Naive UTC timestamp; every DateTime column stores naive UTC."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


# ================================================================
# 1. USERS
# ================================================================
class User(Base):
    __tablename__ = "users"

    # Subject id issued by the auth provider
    id = Column(String(64), primary_key=True)
    email = Column(String(255), unique=True, nullable=True)
    first_name = Column(String(120), nullable=True)
    last_name = Column(String(120), nullable=True)
    profile_image_url = Column(String, nullable=True)
    is_admin = Column(Boolean, default=False, nullable=False)

    spins_remaining = Column(Integer, default=0, nullable=False)
    total_spins_used = Column(Integer, default=0, nullable=False)

    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    __table_args__ = (
        CheckConstraint("spins_remaining >= 0", name="check_spins_remaining_non_negative"),
        CheckConstraint("total_spins_used >= 0", name="check_total_spins_used_non_negative"),
    )

    coupons = relationship("Coupon", back_populates="user")
    orders = relationship("Order", back_populates="user")
    spins = relationship("WheelSpin", back_populates="user")
    support_requests = relationship("SupportRequest", back_populates="user")


# ================================================================
# 2. PRIZES (wheel segments)
# ================================================================
class Prize(Base):
    __tablename__ = "prizes"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    type = Column(String(50), nullable=False)  # free_gold / free_silver / combo / discount
    value = Column(Float, nullable=False)      # monetary value in rupees
    gold_grams = Column(Float, default=0, nullable=False)
    silver_grams = Column(Float, default=0, nullable=False)
    probability = Column(Float, default=10, nullable=False)  # relative weight (0-100)
    is_active = Column(Boolean, default=True, nullable=False)
    color = Column(String(20), default="#DC2626")  # wheel segment color

    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    __table_args__ = (
        CheckConstraint(
            "type IN ('free_gold','free_silver','combo','discount')",
            name="check_prize_type"
        ),
    )


# ================================================================
# 3. COUPONS (one per successful spin)
# ================================================================
class Coupon(Base):
    __tablename__ = "coupons"

    id = Column(Integer, primary_key=True, autoincrement=True)
    code = Column(String(20), unique=True, nullable=False)
    user_id = Column(String(64), ForeignKey("users.id"), nullable=False, index=True)
    prize_id = Column(Integer, ForeignKey("prizes.id"), nullable=False)

    value = Column(Float, nullable=False)
    gold_grams = Column(Float, default=0, nullable=False)
    silver_grams = Column(Float, default=0, nullable=False)

    is_redeemed = Column(Boolean, default=False, nullable=False)
    redeemed_at = Column(DateTime, nullable=True)
    expires_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=utcnow)

    user = relationship("User", back_populates="coupons")
    prize = relationship("Prize")


# ================================================================
# 4. WHEEL SPINS (append-only audit)
# ================================================================
class WheelSpin(Base):
    __tablename__ = "wheel_spins"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(64), ForeignKey("users.id"), nullable=False, index=True)
    prize_id = Column(Integer, ForeignKey("prizes.id"), nullable=False)
    coupon_id = Column(Integer, ForeignKey("coupons.id"), nullable=True)
    created_at = Column(DateTime, default=utcnow)

    user = relationship("User", back_populates="spins")
    prize = relationship("Prize")
    coupon = relationship("Coupon")


# ================================================================
# 5. SPIN PURCHASES (mocked payment confirmations)
# ================================================================
class SpinPurchase(Base):
    __tablename__ = "spin_purchases"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(64), ForeignKey("users.id"), nullable=False, index=True)
    tx_ref = Column(String(64), unique=True, nullable=False)
    amount = Column(Float, nullable=False)
    spins_credited = Column(Integer, nullable=False)
    status = Column(String(20), default="successful", nullable=False)
    created_at = Column(DateTime, default=utcnow)

    __table_args__ = (
        CheckConstraint(
            "status IN ('pending','successful','failed')",
            name="check_spin_purchase_status"
        ),
    )


# ================================================================
# 6. PRODUCTS (gold/silver items)
# ================================================================
class Product(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    category = Column(String(50), nullable=False)  # gold / silver / jewelry
    price_per_gram = Column(Float, nullable=False)
    weight_grams = Column(Float, nullable=False)
    total_price = Column(Float, nullable=False)
    image_url = Column(String, nullable=True)
    in_stock = Column(Boolean, default=True, nullable=False)

    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)


# ================================================================
# 7. ORDERS
# ================================================================
class Order(Base):
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(64), ForeignKey("users.id"), nullable=False, index=True)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False)
    coupon_id = Column(Integer, ForeignKey("coupons.id"), nullable=True)

    original_price = Column(Float, nullable=False)
    discount_amount = Column(Float, default=0, nullable=False)
    final_price = Column(Float, nullable=False)
    status = Column(String(50), default="pending", nullable=False)

    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    __table_args__ = (
        CheckConstraint(
            "status IN ('pending','paid','completed','cancelled')",
            name="check_order_status"
        ),
        CheckConstraint("final_price >= 0", name="check_order_final_price"),
        # A coupon discounts at most one order
        Index("uq_orders_coupon_id", "coupon_id", unique=True),
    )

    user = relationship("User", back_populates="orders")
    product = relationship("Product")
    coupon = relationship("Coupon")


# ================================================================
# 8. WHEEL CONFIG (single row)
# ================================================================
class WheelConfig(Base):
    __tablename__ = "wheel_config"

    id = Column(Integer, primary_key=True, autoincrement=True)
    entry_price = Column(Float, default=10, nullable=False)  # rupees
    spins_per_entry = Column(Integer, default=2, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)


# ================================================================
# 9. SUPPORT REQUESTS (jewelry customization / inquiries)
# ================================================================
class SupportRequest(Base):
    __tablename__ = "support_requests"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(64), ForeignKey("users.id"), nullable=False, index=True)
    type = Column(String(50), nullable=False)  # customization / inquiry
    image_url = Column(Text, nullable=True)
    description = Column(Text, nullable=True)
    gold_weight_estimate = Column(Float, nullable=True)
    contact_phone = Column(String(20), nullable=True)
    status = Column(String(50), default="pending", nullable=False)
    admin_notes = Column(Text, nullable=True)

    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    __table_args__ = (
        CheckConstraint("type IN ('customization','inquiry')", name="check_support_request_type"),
        CheckConstraint(
            "status IN ('pending','contacted','completed','cancelled')",
            name="check_support_request_status"
        ),
    )

    user = relationship("User", back_populates="support_requests")
