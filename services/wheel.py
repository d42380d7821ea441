# ===============================================================
# services/wheel.py: prize selection + spin transaction
# ===============================================================
import logging
import random
from dataclasses import dataclass
from datetime import timedelta
from typing import Optional, Sequence

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from config import COUPON_TTL_DAYS, COUPON_CODE_MAX_ATTEMPTS
from errors import (
    Conflict, InsufficientBalance, InvalidConfiguration, NoPrizesConfigured,
    NotFound, SelectionFailed,
)
from helpers import get_user_by_id
from models import Coupon, Prize, User, WheelSpin, utcnow
from utils.coupon_codes import generate_coupon_code

logger = logging.getLogger(__name__)

_rng = random.SystemRandom()


@dataclass
class SpinOutcome:
    prize: Prize
    coupon: Coupon
    user: User


# ===============================================================
# STEP 1: PRIZE SELECTION ENGINE
# ===============================================================
def select_prize(active_prizes: Sequence[Prize], rng: Optional[random.Random] = None) -> Optional[Prize]:
    """
    Pick one prize, weighted by ``probability``.

    Weights are relative and need not sum to 100. The prizes are walked in
    the order given; a random point in [0, total) is reduced by each weight
    until it reaches zero. Prizes with a weight <= 0 never win: if rounding
    leaves the point above zero after the walk, the last prize with a
    positive weight is returned. Only when no prize has a positive weight
    does the last prize in the list win.

    Returns None only for an empty list.
    """
    if not active_prizes:
        return None

    rng = rng or _rng
    weights = [max(p.probability or 0, 0) for p in active_prizes]
    total = sum(weights)
    if total <= 0:
        logger.warning("⚠️ All active prizes have non-positive weight; using last prize")
        return active_prizes[-1]

    r = rng.random() * total
    last_positive = None
    for prize, weight in zip(active_prizes, weights):
        if weight <= 0:
            continue
        last_positive = prize
        r -= weight
        if r <= 0:
            return prize

    return last_positive


async def get_active_prizes(session: AsyncSession) -> list[Prize]:
    """Active prizes in a stable order (by id)."""
    result = await session.execute(
        select(Prize).where(Prize.is_active.is_(True)).order_by(Prize.id)
    )
    return list(result.scalars().all())


# ===============================================================
# STEP 2: UNIQUE COUPON CODE
# ===============================================================
async def generate_unique_coupon_code(
    session: AsyncSession,
    max_attempts: int = COUPON_CODE_MAX_ATTEMPTS,
    generator=generate_coupon_code,
) -> str:
    """Draw codes until one is not in the coupon store."""
    for attempt in range(1, max_attempts + 1):
        code = generator()
        taken = await session.scalar(select(Coupon.id).where(Coupon.code == code))
        if taken is None:
            return code
        logger.warning(f"🔁 Coupon code collision on attempt {attempt}/{max_attempts}")

    raise InvalidConfiguration(
        f"Could not generate a unique coupon code after {max_attempts} attempts"
    )


# ===============================================================
# STEP 3: SPIN TRANSACTION
# ===============================================================
async def perform_spin(
    session: AsyncSession,
    user_id: str,
    rng: Optional[random.Random] = None,
) -> SpinOutcome:
    """
    Spend one spin: pick a prize, issue its coupon, record the spin.

    Coupon, spin record and balance update are committed together or not
    at all. The balance is decremented with a conditional UPDATE, so two
    requests racing for the last spin cannot both succeed.
    """
    user = await get_user_by_id(session, user_id)
    if user is None:
        raise NotFound("User not found")

    if (user.spins_remaining or 0) <= 0:
        logger.warning(f"⚠️ Spin rejected, no spins left → user_id={user_id}")
        raise InsufficientBalance()

    prizes = await get_active_prizes(session)
    if not prizes:
        raise NoPrizesConfigured()

    prize = select_prize(prizes, rng=rng)
    if prize is None:
        raise SelectionFailed()

    try:
        now = utcnow()
        code = await generate_unique_coupon_code(session)
        coupon = Coupon(
            code=code,
            user_id=user.id,
            prize_id=prize.id,
            value=prize.value,
            gold_grams=prize.gold_grams or 0,
            silver_grams=prize.silver_grams or 0,
            is_redeemed=False,
            expires_at=now + timedelta(days=COUPON_TTL_DAYS),
            created_at=now,
        )
        session.add(coupon)
        await session.flush()

        session.add(WheelSpin(
            user_id=user.id,
            prize_id=prize.id,
            coupon_id=coupon.id,
            created_at=now,
        ))

        claimed = await session.execute(
            update(User)
            .where(User.id == user.id, User.spins_remaining > 0)
            .values(
                spins_remaining=User.spins_remaining - 1,
                total_spins_used=User.total_spins_used + 1,
                updated_at=now,
            )
            .execution_options(synchronize_session=False)
        )
        if claimed.rowcount != 1:
            await _raise_lost_spin(session, user_id)

        await session.refresh(user)
        await session.commit()
    except IntegrityError as e:
        await session.rollback()
        logger.warning(f"⚠️ Spin conflict for user_id={user_id}: {e.orig}")
        raise Conflict() from e
    except Exception:
        if session.in_transaction():
            await session.rollback()
        raise

    logger.info(
        f"🎰 Spin → user_id={user.id}, prize='{prize.name}' (id={prize.id}), "
        f"coupon={coupon.code}, remaining={user.spins_remaining}"
    )
    return SpinOutcome(prize=prize, coupon=coupon, user=user)


async def _raise_lost_spin(session: AsyncSession, user_id: str):
    """
    The conditional decrement matched no row; work out why. The balance is
    read inside the losing transaction, then everything is rolled back.
    """
    remaining = await session.scalar(select(User.spins_remaining).where(User.id == user_id))
    if session.in_transaction():
        await session.rollback()
    if remaining is None:
        raise NotFound("User not found")
    if remaining <= 0:
        logger.warning(f"⚠️ Spin lost the race for the last spin → user_id={user_id}")
        raise InsufficientBalance()
    raise Conflict()
