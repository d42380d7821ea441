# ======================================
# config.py
# (Loads environment variables for the storefront API)
# ======================================
import os
from dotenv import load_dotenv

# Load .env when running locally
load_dotenv()

# ----------------------
# Database
# ----------------------
DATABASE_URL = os.getenv("DATABASE_URL")
if not DATABASE_URL:
    raise RuntimeError("❌ Missing DATABASE_URL env var")

# Ensure asyncpg driver is used for Postgres URLs
if DATABASE_URL.startswith("postgres://"):
    DATABASE_URL = DATABASE_URL.replace("postgres://", "postgresql+asyncpg://", 1)
elif DATABASE_URL.startswith("postgresql://") and "+asyncpg" not in DATABASE_URL:
    DATABASE_URL = DATABASE_URL.replace("postgresql://", "postgresql+asyncpg://", 1)

SQL_ECHO = os.getenv("SQL_ECHO", "false").lower() == "true"
SEED_DEMO_DATA = os.getenv("SEED_DEMO_DATA", "false").lower() == "true"

# ----------------------
# Auth provider
# ----------------------
AUTH_PROVIDER = os.getenv("AUTH_PROVIDER", "demo").lower()
if AUTH_PROVIDER not in ("demo", "supabase"):
    raise RuntimeError(f"❌ Unknown AUTH_PROVIDER: {AUTH_PROVIDER}")

SESSION_SIGNING_SECRET = os.getenv("SESSION_SIGNING_SECRET", "change-me-in-production")
SESSION_MAX_AGE_SECONDS = int(os.getenv("SESSION_MAX_AGE_SECONDS", str(7 * 24 * 60 * 60)))

SUPABASE_URL = os.getenv("SUPABASE_URL")
SUPABASE_SERVICE_KEY = os.getenv("SUPABASE_SERVICE_KEY")
if AUTH_PROVIDER == "supabase" and not (SUPABASE_URL and SUPABASE_SERVICE_KEY):
    raise RuntimeError("❌ AUTH_PROVIDER=supabase needs SUPABASE_URL and SUPABASE_SERVICE_KEY")

# ----------------------
# Wheel & coupons
# ----------------------
COUPON_CODE_PREFIX = os.getenv("COUPON_CODE_PREFIX", "GF")
COUPON_TTL_DAYS = int(os.getenv("COUPON_TTL_DAYS", "30"))
COUPON_CODE_MAX_ATTEMPTS = int(os.getenv("COUPON_CODE_MAX_ATTEMPTS", "5"))

DEFAULT_SPINS_PER_ENTRY = int(os.getenv("DEFAULT_SPINS_PER_ENTRY", "2"))
DEFAULT_ENTRY_PRICE = float(os.getenv("DEFAULT_ENTRY_PRICE", "10"))
