# ===============================================================
# db.py: Central async SQLAlchemy setup
# ===============================================================
import logging
from contextlib import asynccontextmanager
from sqlalchemy import event, select, func
from sqlalchemy.ext.asyncio import (
    create_async_engine,
    AsyncSession,
)
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import NullPool

# Import Base and models cleanly
from base import Base
from config import DATABASE_URL, SQL_ECHO, DEFAULT_ENTRY_PRICE, DEFAULT_SPINS_PER_ENTRY
from models import WheelConfig, Prize, Product

logger = logging.getLogger(__name__)

IS_SQLITE = DATABASE_URL.startswith("sqlite")

# -------------------------------------------------
# Engine & Async Session Factory
# -------------------------------------------------
if IS_SQLITE:
    # Local development / tests. One connection per session; writers
    # queue on the database lock instead of failing fast.
    engine = create_async_engine(
        DATABASE_URL,
        echo=SQL_ECHO,
        poolclass=NullPool,
        connect_args={"timeout": 30},
    )

    @event.listens_for(engine.sync_engine, "connect")
    def _sqlite_disable_implicit_begin(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def _sqlite_begin_immediate(conn):
        # Take the write lock up front so check-then-update runs serialized
        conn.exec_driver_sql("BEGIN IMMEDIATE")
else:
    engine = create_async_engine(
        DATABASE_URL,
        echo=SQL_ECHO,
        pool_pre_ping=True,     # checks if connection is alive
        pool_recycle=1800,      # recycle connections every 30 mins
    )

# This is the async session factory the whole app should import
async_sessionmaker = sessionmaker(
    bind=engine,
    expire_on_commit=False,
    class_=AsyncSession,
)

# -------------------------------------------------
# FastAPI Dependencies
# -------------------------------------------------
async def get_session() -> AsyncSession:
    """FastAPI database session dependency."""
    async with async_sessionmaker() as session:
        yield session


@asynccontextmanager
async def get_async_session():
    """Use in startup hooks, scripts or tests outside FastAPI context."""
    async with async_sessionmaker() as session:
        yield session

# -------------------------------------------------
# Database Initialization (development only)
# -------------------------------------------------
async def init_db():
    """Create tables manually, not for production (use migrations/ instead)."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("✅ Database initialized (development use only)")


async def drop_db():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

# -------------------------------------------------
# Wheel Config Initialization Helper
# -------------------------------------------------
async def get_or_create_wheel_config(session: AsyncSession) -> WheelConfig:
    """Return the single WheelConfig row, creating the default one if missing.

    Does not commit; the caller owns the transaction.
    """
    result = await session.execute(select(WheelConfig).order_by(WheelConfig.id).limit(1))
    config = result.scalars().first()
    if not config:
        config = WheelConfig(
            entry_price=DEFAULT_ENTRY_PRICE,
            spins_per_entry=DEFAULT_SPINS_PER_ENTRY,
            is_active=True,
        )
        session.add(config)
        await session.flush()
        logger.info("🎡 Default WheelConfig created")
    return config


async def init_wheel_config():
    """Ensure the default WheelConfig row exists."""
    async with get_async_session() as session:
        await get_or_create_wheel_config(session)
        await session.commit()

# -------------------------------------------------
# Demo data (prizes + catalog)
# -------------------------------------------------
SAMPLE_PRIZES = [
    dict(name="Gold 1 Gram", description="Win 1 gram of pure 24K gold", type="free_gold",
         value=500, gold_grams=1.0, silver_grams=0, probability=5, color="#DC2626"),
    dict(name="Silver 5 Grams", description="Win 5 grams of pure silver", type="free_silver",
         value=300, gold_grams=0, silver_grams=5.0, probability=10, color="#991B1B"),
    dict(name="Rs 100 Off", description="Get Rs 100 discount on any purchase", type="discount",
         value=100, gold_grams=0, silver_grams=0, probability=25, color="#FFFFFF"),
    dict(name="Rs 50 Off", description="Get Rs 50 discount on any purchase", type="discount",
         value=50, gold_grams=0, silver_grams=0, probability=20, color="#FEE2E2"),
    dict(name="Gold 0.5 Gram", description="Win 0.5 gram of pure 24K gold", type="free_gold",
         value=250, gold_grams=0.5, silver_grams=0, probability=8, color="#B91C1C"),
    dict(name="Silver 2 Grams", description="Win 2 grams of pure silver", type="free_silver",
         value=120, gold_grams=0, silver_grams=2.0, probability=15, color="#FECACA"),
    dict(name="Rs 200 Off", description="Get Rs 200 discount on gold items", type="combo",
         value=200, gold_grams=0, silver_grams=0, probability=3, color="#7F1D1D"),
    dict(name="Rs 25 Off", description="Get Rs 25 discount on any purchase", type="discount",
         value=25, gold_grams=0, silver_grams=0, probability=14, color="#FEF2F2"),
]

SAMPLE_PRODUCTS = [
    dict(name="24K Gold Coin 1g", category="gold", price_per_gram=6500, weight_grams=1.0),
    dict(name="24K Gold Bar 5g", category="gold", price_per_gram=6450, weight_grams=5.0),
    dict(name="Silver Coin 10g", category="silver", price_per_gram=80, weight_grams=10.0),
    dict(name="Silver Bar 100g", category="silver", price_per_gram=78, weight_grams=100.0),
    dict(name="22K Gold Ring", category="jewelry", price_per_gram=6000, weight_grams=3.5),
]


async def seed_demo_data():
    """Insert sample prizes and products into an empty database."""
    async with get_async_session() as session:
        prize_count = await session.scalar(select(func.count(Prize.id)))
        if not prize_count:
            session.add_all([Prize(**p) for p in SAMPLE_PRIZES])
            logger.info(f"🎰 Seeded {len(SAMPLE_PRIZES)} sample prizes")

        product_count = await session.scalar(select(func.count(Product.id)))
        if not product_count:
            session.add_all([
                Product(total_price=round(p["price_per_gram"] * p["weight_grams"], 2), **p)
                for p in SAMPLE_PRODUCTS
            ])
            logger.info(f"🪙 Seeded {len(SAMPLE_PRODUCTS)} sample products")

        await get_or_create_wheel_config(session)
        await session.commit()

# -------------------------------------------------
# Health Check Utility
# -------------------------------------------------
async def check_connection():
    """Quick check if DB is reachable."""
    try:
        async with engine.connect() as conn:
            await conn.run_sync(lambda _: None)
        logger.info("🔌 Database connection OK")
    except Exception as e:
        logger.error(f"❌ Database connection failed: {e}")
        raise
