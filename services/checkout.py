# ================================================================
# services/checkout.py: orders + coupon redemption
# ================================================================
import logging
from datetime import datetime

from sqlalchemy import select, update, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from errors import AlreadyRedeemed, Conflict, Expired, Forbidden, InvalidConfiguration, NotFound
from models import Coupon, Order, Product, utcnow
from utils.coupon_codes import is_valid_coupon_code, normalize_coupon_code

logger = logging.getLogger(__name__)


def ensure_coupon_usable(coupon: Coupon | None, user_id: str, now: datetime) -> Coupon:
    """Raise the matching error unless ``user_id`` may redeem ``coupon`` now."""
    if coupon is None:
        raise NotFound("Coupon not found")
    if coupon.user_id != user_id:
        raise Forbidden("This coupon belongs to another account")
    if coupon.is_redeemed:
        raise AlreadyRedeemed()
    if coupon.expires_at is not None and coupon.expires_at <= now:
        raise Expired()
    return coupon


def calculate_discount(coupon_value: float, order_total: float) -> float:
    """Discount never exceeds the order total."""
    return max(0.0, min(coupon_value or 0, order_total))


# ------------------------------------------------------
# Validate a coupon by code (no side effects)
# ------------------------------------------------------
async def validate_coupon(session: AsyncSession, code: str, user_id: str) -> Coupon:
    code = normalize_coupon_code(code)
    if not is_valid_coupon_code(code):
        raise NotFound("Coupon not found")
    result = await session.execute(select(Coupon).where(Coupon.code == code))
    return ensure_coupon_usable(result.scalar_one_or_none(), user_id, utcnow())


# ------------------------------------------------------
# Create an order, redeeming at most one coupon
# ------------------------------------------------------
async def create_order(
    session: AsyncSession,
    user_id: str,
    product_id: int,
    coupon_id: int | None = None,
) -> Order:
    """
    Price the product, apply the coupon and store the order. The coupon is
    flipped to redeemed by a conditional UPDATE in the same transaction as
    the order insert, so it can discount only one order. Commits.
    """
    product = await session.get(Product, product_id)
    if product is None:
        raise NotFound("Product not found")
    if not product.in_stock:
        raise InvalidConfiguration("Product is out of stock")

    now = utcnow()
    discount = 0.0

    try:
        if coupon_id is not None:
            coupon = ensure_coupon_usable(await session.get(Coupon, coupon_id), user_id, now)
            discount = calculate_discount(coupon.value, product.total_price)

            redeemed = await session.execute(
                update(Coupon)
                .where(
                    Coupon.id == coupon_id,
                    Coupon.user_id == user_id,
                    Coupon.is_redeemed.is_(False),
                    or_(Coupon.expires_at.is_(None), Coupon.expires_at > now),
                )
                .values(is_redeemed=True, redeemed_at=now)
                .execution_options(synchronize_session=False)
            )
            if redeemed.rowcount != 1:
                await session.rollback()
                logger.warning(f"⚠️ Coupon {coupon_id} redeemed concurrently → user_id={user_id}")
                raise AlreadyRedeemed()

        final_price = max(0.0, product.total_price - discount)
        order = Order(
            user_id=user_id,
            product_id=product.id,
            coupon_id=coupon_id,
            original_price=product.total_price,
            discount_amount=discount,
            final_price=final_price,
            # Fully discounted orders need no payment
            status="paid" if final_price == 0 else "pending",
            created_at=now,
            updated_at=now,
        )
        session.add(order)
        await session.commit()
    except IntegrityError as e:
        await session.rollback()
        logger.warning(f"⚠️ Order conflict for user_id={user_id}: {e.orig}")
        raise Conflict() from e
    except Exception:
        if session.in_transaction():
            await session.rollback()
        raise

    logger.info(
        f"🧾 Order {order.id} → user_id={user_id}, product={product.id}, "
        f"coupon={coupon_id}, discount={discount:,.2f}, final={final_price:,.2f}"
    )
    return order
