import asyncio
import random

import pytest
from sqlalchemy import func, select, update

from db import async_sessionmaker
from errors import Conflict, InsufficientBalance, InvalidConfiguration, NoPrizesConfigured, NotFound
from models import Coupon, SpinPurchase, User, WheelConfig, WheelSpin
from services.payments import buy_spins
from services import wheel
from services.wheel import perform_spin

from test_coupon_codes import CODE_RE


async def _count(model, user_id):
    async with async_sessionmaker() as s:
        return await s.scalar(select(func.count()).select_from(model).where(model.user_id == user_id))


async def _balance(user_id):
    async with async_sessionmaker() as s:
        user = await s.get(User, user_id)
        return user.spins_remaining, user.total_spins_used


async def test_spin_issues_coupon_and_decrements(make_user, prizes, session):
    await make_user("alice", spins=3)

    outcome = await perform_spin(session, "alice", rng=random.Random(5))

    assert outcome.prize.id in {p.id for p in prizes}
    assert outcome.coupon.user_id == "alice"
    assert outcome.coupon.prize_id == outcome.prize.id
    assert outcome.coupon.value == outcome.prize.value
    assert outcome.coupon.is_redeemed is False
    assert CODE_RE.match(outcome.coupon.code)
    assert outcome.coupon.expires_at > outcome.coupon.created_at
    assert outcome.user.spins_remaining == 2

    assert await _balance("alice") == (2, 1)
    assert await _count(Coupon, "alice") == 1
    assert await _count(WheelSpin, "alice") == 1


async def test_spin_without_balance_changes_nothing(make_user, prizes, session):
    await make_user("bob", spins=0)

    with pytest.raises(InsufficientBalance):
        await perform_spin(session, "bob")

    assert await _balance("bob") == (0, 0)
    assert await _count(Coupon, "bob") == 0
    assert await _count(WheelSpin, "bob") == 0


async def test_spin_with_no_active_prizes(make_user, session):
    await make_user("carol", spins=1)

    with pytest.raises(NoPrizesConfigured):
        await perform_spin(session, "carol")

    assert await _balance("carol") == (1, 0)


async def test_spin_unknown_user(prizes, session):
    with pytest.raises(NotFound):
        await perform_spin(session, "ghost")


async def test_codes_are_unique_across_spins(make_user, prizes, session):
    await make_user("dave", spins=25)

    codes = set()
    for _ in range(25):
        outcome = await perform_spin(session, "dave")
        codes.add(outcome.coupon.code)

    assert len(codes) == 25
    assert await _balance("dave") == (0, 25)


async def test_concurrent_spins_never_overspend(make_user, prizes):
    await make_user("erin", spins=10)

    async def spin_once():
        async with async_sessionmaker() as s:
            return await perform_spin(s, "erin")

    results = await asyncio.gather(*(spin_once() for _ in range(50)), return_exceptions=True)

    wins = [r for r in results if not isinstance(r, Exception)]
    losses = [r for r in results if isinstance(r, Exception)]
    assert len(wins) == 10
    assert len(losses) == 40
    assert all(isinstance(e, InsufficientBalance) for e in losses)

    assert await _balance("erin") == (0, 10)
    assert await _count(Coupon, "erin") == 10
    assert await _count(WheelSpin, "erin") == 10


async def test_buy_spins_credits_one_entry(make_user, session):
    await make_user("frank", spins=1)

    result = await buy_spins(session, "frank")

    assert result == {"spins_added": 2, "new_spin_count": 3}
    assert await _count(SpinPurchase, "frank") == 1


async def test_buy_spins_follows_wheel_config(make_user, session):
    await make_user("gina")
    session.add(WheelConfig(entry_price=25, spins_per_entry=5, is_active=True))
    await session.commit()

    result = await buy_spins(session, "gina")

    assert result == {"spins_added": 5, "new_spin_count": 5}


async def test_buy_spins_refused_when_wheel_disabled(make_user, session):
    await make_user("hank")
    session.add(WheelConfig(entry_price=10, spins_per_entry=2, is_active=False))
    await session.commit()

    with pytest.raises(InvalidConfiguration):
        await buy_spins(session, "hank")

    assert await _balance("hank") == (0, 0)


async def test_buy_spins_unknown_user(session):
    with pytest.raises(NotFound):
        await buy_spins(session, "ghost")


async def test_balance_drained_mid_spin_is_insufficient(make_user, prizes, session, monkeypatch):
    await make_user("ivy", spins=1)

    async def drain_then_issue(s, *args, **kwargs):
        # Another request spends the last spin after the balance check
        await s.execute(
            update(User)
            .where(User.id == "ivy")
            .values(spins_remaining=0)
            .execution_options(synchronize_session=False)
        )
        return "GFRACE22"

    monkeypatch.setattr(wheel, "generate_unique_coupon_code", drain_then_issue)

    with pytest.raises(InsufficientBalance):
        await perform_spin(session, "ivy")

    assert await _balance("ivy") == (1, 0)
    assert await _count(Coupon, "ivy") == 0
    assert await _count(WheelSpin, "ivy") == 0


async def test_duplicate_code_surfaces_as_conflict(make_user, prizes, make_coupon, session, monkeypatch):
    await make_user("jack", spins=2)
    await make_coupon("jack", prizes[0].id, code="GFTEST22")

    async def stale_code(s, *args, **kwargs):
        return "GFTEST22"

    monkeypatch.setattr(wheel, "generate_unique_coupon_code", stale_code)

    with pytest.raises(Conflict) as exc_info:
        await perform_spin(session, "jack")

    assert exc_info.value.retryable is True
    assert exc_info.value.status_code == 409
    assert await _balance("jack") == (2, 0)
    assert await _count(Coupon, "jack") == 1
    assert await _count(WheelSpin, "jack") == 0
