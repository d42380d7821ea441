# ===============================================================
# handlers/wheel.py  (🎡 spin, buy spins, wheel config, prizes)
# ===============================================================
import logging
from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from db import get_session, get_or_create_wheel_config
from models import Prize
from schemas import BuySpinsOut, PrizeOut, SpinOut, WheelConfigOut
from services.payments import buy_spins
from services.wheel import get_active_prizes, perform_spin
from utils.auth import get_current_user_id

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["wheel"])


# -------------------------------------------------
# Prizes (public, for drawing the wheel)
# -------------------------------------------------
@router.get("/prizes", response_model=list[PrizeOut])
async def list_prizes(session: AsyncSession = Depends(get_session)):
    result = await session.execute(select(Prize).order_by(Prize.id))
    return result.scalars().all()


@router.get("/prizes/active", response_model=list[PrizeOut])
async def list_active_prizes(session: AsyncSession = Depends(get_session)):
    return await get_active_prizes(session)


# -------------------------------------------------
# Wheel config
# -------------------------------------------------
@router.get("/wheel/config", response_model=WheelConfigOut)
async def wheel_config(session: AsyncSession = Depends(get_session)):
    config = await get_or_create_wheel_config(session)
    await session.commit()
    return config


# -------------------------------------------------
# Spin
# -------------------------------------------------
@router.post("/wheel/spin", response_model=SpinOut)
async def spin(
    user_id: str = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_session),
):
    outcome = await perform_spin(session, user_id)
    return {"prize": outcome.prize, "coupon": outcome.coupon}


# -------------------------------------------------
# Buy spins (mocked payment)
# -------------------------------------------------
@router.post("/wheel/buy-spins", response_model=BuySpinsOut)
async def buy_wheel_spins(
    user_id: str = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_session),
):
    return await buy_spins(session, user_id)


def register_handlers(app):
    app.include_router(router)
