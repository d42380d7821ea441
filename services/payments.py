# ================================================================
# services/payments.py
# ================================================================
"""
Spin purchases.

There is no payment gateway behind this: ``confirm_mock_payment`` stands in
for the checkout + verification round trip and always succeeds. The
purchase is still recorded (SpinPurchase) so the audit trail matches a real
integration.
"""
import logging
import uuid
from sqlalchemy.ext.asyncio import AsyncSession

from db import get_or_create_wheel_config
from errors import InvalidConfiguration, NotFound
from helpers import add_spins, get_user_by_id, mask_sensitive
from models import SpinPurchase

logger = logging.getLogger(__name__)


# ------------------------------------------------------
# 1. Mocked payment confirmation
# ------------------------------------------------------
def confirm_mock_payment(user_id: str, amount: float) -> str:
    """Pretend the gateway confirmed the charge; return its tx_ref."""
    tx_ref = f"GFPAY-{uuid.uuid4().hex[:20]}"
    logger.info(
        f"💳 Mock payment confirmed → user_id={user_id}, amount={amount:,.2f}, "
        f"tx_ref={mask_sensitive(tx_ref, visible=6)}"
    )
    return tx_ref


# ------------------------------------------------------
# 2. Buy spins
# ------------------------------------------------------
async def buy_spins(session: AsyncSession, user_id: str) -> dict:
    """
    Credit one wheel entry (WheelConfig.spins_per_entry spins, 2 by default)
    to the user. Commits.

    Returns {"spins_added": int, "new_spin_count": int}.
    """
    user = await get_user_by_id(session, user_id)
    if user is None:
        raise NotFound("User not found")

    config = await get_or_create_wheel_config(session)
    if not config.is_active:
        raise InvalidConfiguration("The wheel is currently disabled")

    spins = config.spins_per_entry
    amount = config.entry_price
    if spins <= 0:
        raise InvalidConfiguration("Wheel is configured with no spins per entry")

    try:
        tx_ref = confirm_mock_payment(user.id, amount)
        session.add(SpinPurchase(
            user_id=user.id,
            tx_ref=tx_ref,
            amount=amount,
            spins_credited=spins,
            status="successful",
        ))
        await add_spins(session, user, spins)
        await session.commit()
    except Exception:
        await session.rollback()
        raise

    logger.info(f"✅ User {user.id} bought {spins} spins → now {user.spins_remaining}")
    return {"spins_added": spins, "new_spin_count": user.spins_remaining}
