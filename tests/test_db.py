from sqlalchemy import func, select

from db import SAMPLE_PRIZES, SAMPLE_PRODUCTS, init_wheel_config, seed_demo_data
from models import Prize, Product, WheelConfig
from services.wheel import get_active_prizes

from conftest import SAMPLE_WEIGHTS


async def test_seed_is_idempotent(session):
    await seed_demo_data()
    await seed_demo_data()
    await init_wheel_config()

    assert await session.scalar(select(func.count(Prize.id))) == len(SAMPLE_PRIZES)
    assert await session.scalar(select(func.count(Product.id))) == len(SAMPLE_PRODUCTS)
    assert await session.scalar(select(func.count(WheelConfig.id))) == 1


async def test_seeded_wheel_keeps_storage_order(session):
    await seed_demo_data()

    prizes = await get_active_prizes(session)

    assert [p.probability for p in prizes] == SAMPLE_WEIGHTS
    assert sum(SAMPLE_WEIGHTS) == 100
