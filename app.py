# =====================================================
# app.py
# =====================================================
import os
import logging

# Force unbuffered output (container platforms need this for real-time logs)
os.environ["PYTHONUNBUFFERED"] = "1"

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

# Local imports
from logging_setup import capture_exception
from config import SEED_DEMO_DATA
from db import check_connection, init_db, init_wheel_config, seed_demo_data
from errors import ShopError
from handlers import admin, core, shop, support, wheel

logger = logging.getLogger(__name__)

# -------------------------------------------------
# Initialize FastAPI
# -------------------------------------------------
app = FastAPI(title="Golden Fortune Storefront")

# ✅ Register handlers
core.register_handlers(app)
wheel.register_handlers(app)
shop.register_handlers(app)
support.register_handlers(app)
admin.register_handlers(app)


# -------------------------------------------------
# Error handlers
# -------------------------------------------------
@app.exception_handler(ShopError)
async def shop_error_handler(request: Request, exc: ShopError):
    if exc.status_code >= 500 or exc.retryable:
        logger.warning(f"⚠️ {request.method} {request.url.path} → {type(exc).__name__}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception):
    logger.exception(f"❌ Unhandled error on {request.method} {request.url.path}")
    capture_exception(exc)
    return JSONResponse(
        status_code=500,
        content={"message": "Internal server error", "error": "InternalError", "retryable": False},
    )


# -------------------------------------------------
# Root route
# -------------------------------------------------
@app.get("/")
@app.head("/")
async def root():
    return {
        "status": "ok",
        "message": "Golden Fortune API is running ✅",
        "health": "Check /health for database status",
    }


@app.get("/health")
async def health():
    try:
        await check_connection()
    except Exception:
        return JSONResponse(status_code=503, content={"status": "error", "database": "unreachable"})
    return {"status": "ok", "database": "ok"}


# -------------------------------------------------
# Startup event
# -------------------------------------------------
@app.on_event("startup")
async def on_startup():
    logger.info("🚀 Starting up Golden Fortune...")

    if SEED_DEMO_DATA:
        # Local/demo runs: create tables and sample prizes/products
        await init_db()
        await seed_demo_data()

    # Ensure the WheelConfig row exists
    await init_wheel_config()
    logger.info("✅ Startup complete")
