"""Pytest fixtures: a throwaway SQLite database and an in-process API client."""

import os
import tempfile

# Configure before any project module reads the environment
_DB_DIR = tempfile.mkdtemp(prefix="golden-fortune-tests-")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{os.path.join(_DB_DIR, 'test.db')}"
os.environ["AUTH_PROVIDER"] = "demo"
os.environ["SESSION_SIGNING_SECRET"] = "test-signing-secret"
os.environ["SEED_DEMO_DATA"] = "false"

from datetime import timedelta

import httpx
import pytest
import pytest_asyncio

from db import async_sessionmaker, drop_db, init_db
from models import Coupon, Prize, Product, User, utcnow
from utils.auth import issue_session_token

# Weights from the sample wheel
SAMPLE_WEIGHTS = [5, 10, 25, 20, 8, 15, 3, 14]


@pytest_asyncio.fixture
async def db():
    await drop_db()
    await init_db()
    yield
    await drop_db()


@pytest_asyncio.fixture
async def session(db):
    async with async_sessionmaker() as s:
        yield s


@pytest_asyncio.fixture
async def make_user(db):
    async def _make_user(user_id="user-1", spins=0, is_admin=False):
        async with async_sessionmaker() as s:
            user = User(
                id=user_id,
                email=f"{user_id}@example.com",
                first_name=user_id,
                is_admin=is_admin,
                spins_remaining=spins,
                total_spins_used=0,
            )
            s.add(user)
            await s.commit()
            return user

    return _make_user


@pytest_asyncio.fixture
async def prizes(db):
    async with async_sessionmaker() as s:
        rows = [
            Prize(
                name=f"Prize {i}",
                type="discount",
                value=float(25 * (i + 1)),
                gold_grams=0,
                silver_grams=0,
                probability=weight,
                is_active=True,
            )
            for i, weight in enumerate(SAMPLE_WEIGHTS)
        ]
        s.add_all(rows)
        await s.commit()
        return rows


@pytest_asyncio.fixture
async def make_product(db):
    async def _make_product(total_price=300.0, in_stock=True):
        async with async_sessionmaker() as s:
            product = Product(
                name="Silver Coin",
                category="silver",
                price_per_gram=total_price / 10,
                weight_grams=10,
                total_price=total_price,
                in_stock=in_stock,
            )
            s.add(product)
            await s.commit()
            return product

    return _make_product


@pytest_asyncio.fixture
async def make_coupon(db):
    async def _make_coupon(user_id, prize_id, value=100.0, code="GFTEST22", expires_in_days=30):
        async with async_sessionmaker() as s:
            coupon = Coupon(
                code=code,
                user_id=user_id,
                prize_id=prize_id,
                value=value,
                is_redeemed=False,
                expires_at=utcnow() + timedelta(days=expires_in_days),
            )
            s.add(coupon)
            await s.commit()
            return coupon

    return _make_coupon


@pytest_asyncio.fixture
async def client(db):
    from app import app

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


@pytest.fixture
def auth_headers():
    def _auth_headers(user_id):
        return {"Authorization": f"Bearer {issue_session_token(user_id)}"}

    return _auth_headers
