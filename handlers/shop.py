# ===============================================================
# handlers/shop.py  (🪙 catalog, coupons, orders)
# ===============================================================
import logging
from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from db import get_session
from errors import NotFound
from models import Coupon, Order, Product, User
from schemas import CouponOut, OrderIn, OrderOut, ProductOut
from services.checkout import create_order, validate_coupon
from utils.auth import get_current_user

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["shop"])


# -------------------------------------------------
# Products
# -------------------------------------------------
@router.get("/products", response_model=list[ProductOut])
async def list_products(session: AsyncSession = Depends(get_session)):
    result = await session.execute(
        select(Product).where(Product.in_stock.is_(True)).order_by(Product.id)
    )
    return result.scalars().all()


@router.get("/products/{product_id}", response_model=ProductOut)
async def get_product(product_id: int, session: AsyncSession = Depends(get_session)):
    product = await session.get(Product, product_id)
    if product is None:
        raise NotFound("Product not found")
    return product


# -------------------------------------------------
# Coupons
# -------------------------------------------------
@router.get("/coupons/user", response_model=list[CouponOut])
async def my_coupons(
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    result = await session.execute(
        select(Coupon)
        .where(Coupon.user_id == user.id)
        .order_by(Coupon.created_at.desc(), Coupon.id.desc())
    )
    return result.scalars().all()


@router.get("/coupons/validate/{code}", response_model=CouponOut)
async def check_coupon(
    code: str,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    return await validate_coupon(session, code, user.id)


# -------------------------------------------------
# Orders
# -------------------------------------------------
@router.post("/orders", response_model=OrderOut)
async def place_order(
    body: OrderIn,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    return await create_order(session, user.id, body.product_id, body.coupon_id)


@router.get("/orders/user", response_model=list[OrderOut])
async def my_orders(
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    result = await session.execute(
        select(Order)
        .where(Order.user_id == user.id)
        .order_by(Order.created_at.desc(), Order.id.desc())
    )
    return result.scalars().all()


def register_handlers(app):
    app.include_router(router)
