# ==============================================================
# handlers/admin.py: Admin API (inventory, prizes, orders, support)
# ==============================================================
import logging
from fastapi import APIRouter, Depends
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from db import get_session, get_or_create_wheel_config
from errors import NotFound
from models import Coupon, Order, Prize, Product, SupportRequest, User, WheelSpin, utcnow
from schemas import (
    CouponOut, OrderOut, OrderStatusIn, PrizeIn, PrizeOut, PrizeUpdate, ProductIn,
    ProductOut, ProductUpdate, SupportRequestOut, SupportRequestStatusIn, UserOut,
    WheelConfigIn, WheelConfigOut, WheelSpinOut,
)
from utils.auth import require_admin

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/admin", tags=["admin"], dependencies=[Depends(require_admin)])


async def _get_or_404(session: AsyncSession, model, obj_id: int, label: str):
    obj = await session.get(model, obj_id)
    if obj is None:
        raise NotFound(f"{label} not found")
    return obj


def _apply(obj, changes: dict):
    for field, value in changes.items():
        setattr(obj, field, value)


# ----------------------------
# Users
# ----------------------------
@router.get("/users", response_model=list[UserOut])
async def list_users(session: AsyncSession = Depends(get_session)):
    result = await session.execute(select(User).order_by(User.created_at.desc()))
    return result.scalars().all()


# ----------------------------
# Prizes
# ----------------------------
@router.post("/prizes", response_model=PrizeOut)
async def create_prize(body: PrizeIn, session: AsyncSession = Depends(get_session)):
    prize = Prize(**body.model_dump())
    session.add(prize)
    await session.commit()
    logger.info(f"🎁 Prize created → id={prize.id}, '{prize.name}' weight={prize.probability}")
    return prize


@router.patch("/prizes/{prize_id}", response_model=PrizeOut)
async def update_prize(prize_id: int, body: PrizeUpdate, session: AsyncSession = Depends(get_session)):
    prize = await _get_or_404(session, Prize, prize_id, "Prize")
    _apply(prize, body.model_dump(exclude_unset=True, exclude_none=True))
    await session.commit()
    await session.refresh(prize)
    logger.info(f"🎁 Prize updated → id={prize.id}")
    return prize


@router.delete("/prizes/{prize_id}")
async def delete_prize(prize_id: int, session: AsyncSession = Depends(get_session)):
    """Remove a prize; prizes that already issued coupons are only deactivated."""
    prize = await _get_or_404(session, Prize, prize_id, "Prize")
    issued = await session.scalar(select(func.count(Coupon.id)).where(Coupon.prize_id == prize_id))
    if issued:
        prize.is_active = False
        await session.commit()
        logger.info(f"🎁 Prize {prize_id} has {issued} coupons; deactivated instead of deleted")
        return {"success": True, "deactivated": True}

    await session.delete(prize)
    await session.commit()
    logger.info(f"🗑 Prize {prize_id} deleted")
    return {"success": True, "deactivated": False}


# ----------------------------
# Products
# ----------------------------
@router.post("/products", response_model=ProductOut)
async def create_product(body: ProductIn, session: AsyncSession = Depends(get_session)):
    data = body.model_dump()
    if data.get("total_price") is None:
        data["total_price"] = round(data["price_per_gram"] * data["weight_grams"], 2)
    product = Product(**data)
    session.add(product)
    await session.commit()
    logger.info(f"🪙 Product created → id={product.id}, '{product.name}'")
    return product


@router.patch("/products/{product_id}", response_model=ProductOut)
async def update_product(product_id: int, body: ProductUpdate, session: AsyncSession = Depends(get_session)):
    product = await _get_or_404(session, Product, product_id, "Product")
    changes = body.model_dump(exclude_unset=True, exclude_none=True)
    _apply(product, changes)
    if "total_price" not in changes and ({"price_per_gram", "weight_grams"} & changes.keys()):
        product.total_price = round(product.price_per_gram * product.weight_grams, 2)
    await session.commit()
    await session.refresh(product)
    return product


@router.delete("/products/{product_id}")
async def delete_product(product_id: int, session: AsyncSession = Depends(get_session)):
    """Products with orders stay for the order history and are marked out of stock."""
    product = await _get_or_404(session, Product, product_id, "Product")
    ordered = await session.scalar(select(func.count(Order.id)).where(Order.product_id == product_id))
    if ordered:
        product.in_stock = False
        await session.commit()
        return {"success": True, "deactivated": True}

    await session.delete(product)
    await session.commit()
    logger.info(f"🗑 Product {product_id} deleted")
    return {"success": True, "deactivated": False}


# ----------------------------
# Orders
# ----------------------------
@router.get("/orders", response_model=list[OrderOut])
async def list_orders(session: AsyncSession = Depends(get_session)):
    result = await session.execute(select(Order).order_by(Order.created_at.desc(), Order.id.desc()))
    return result.scalars().all()


@router.patch("/orders/{order_id}/status", response_model=OrderOut)
async def update_order_status(order_id: int, body: OrderStatusIn, session: AsyncSession = Depends(get_session)):
    order = await _get_or_404(session, Order, order_id, "Order")
    order.status = body.status
    order.updated_at = utcnow()
    await session.commit()
    logger.info(f"🧾 Order {order_id} → {body.status}")
    return order


# ----------------------------
# Coupons & spins (read-only audit)
# ----------------------------
@router.get("/coupons", response_model=list[CouponOut])
async def list_coupons(session: AsyncSession = Depends(get_session)):
    result = await session.execute(select(Coupon).order_by(Coupon.created_at.desc(), Coupon.id.desc()))
    return result.scalars().all()


@router.get("/spins", response_model=list[WheelSpinOut])
async def list_spins(session: AsyncSession = Depends(get_session)):
    result = await session.execute(select(WheelSpin).order_by(WheelSpin.created_at.desc(), WheelSpin.id.desc()))
    return result.scalars().all()


# ----------------------------
# Support requests
# ----------------------------
@router.get("/support-requests", response_model=list[SupportRequestOut])
async def list_support_requests(session: AsyncSession = Depends(get_session)):
    result = await session.execute(
        select(SupportRequest).order_by(SupportRequest.created_at.desc(), SupportRequest.id.desc())
    )
    return result.scalars().all()


@router.patch("/support-requests/{request_id}/status", response_model=SupportRequestOut)
async def update_support_request_status(
    request_id: int,
    body: SupportRequestStatusIn,
    session: AsyncSession = Depends(get_session),
):
    request = await _get_or_404(session, SupportRequest, request_id, "Support request")
    request.status = body.status
    if body.admin_notes is not None:
        request.admin_notes = body.admin_notes
    request.updated_at = utcnow()
    await session.commit()
    return request


# ----------------------------
# Wheel config
# ----------------------------
@router.patch("/wheel/config", response_model=WheelConfigOut)
async def update_wheel_config(body: WheelConfigIn, session: AsyncSession = Depends(get_session)):
    config = await get_or_create_wheel_config(session)
    _apply(config, body.model_dump(exclude_unset=True, exclude_none=True))
    await session.commit()
    await session.refresh(config)
    logger.info(
        f"🎡 Wheel config → price={config.entry_price}, spins={config.spins_per_entry}, "
        f"active={config.is_active}"
    )
    return config


def register_handlers(app):
    app.include_router(router)
