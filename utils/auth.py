# ===============================================================
# utils/auth.py: auth provider adapters + FastAPI dependencies
# ===============================================================
import logging
import itsdangerous
import httpx
from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from config import (
    AUTH_PROVIDER,
    SESSION_MAX_AGE_SECONDS,
    SESSION_SIGNING_SECRET,
    SUPABASE_SERVICE_KEY,
    SUPABASE_URL,
)
from db import get_session
from errors import Forbidden, NotFound, Unauthorized
from helpers import get_user_by_id, is_admin, upsert_user
from models import User

logger = logging.getLogger(__name__)

SESSION_COOKIE = "sessionId"

# ---------------------------------------------------------------
# 🔐 Signed session tokens (demo provider)
# ---------------------------------------------------------------
serializer = itsdangerous.URLSafeTimedSerializer(SESSION_SIGNING_SECRET, salt="gf-session")


def issue_session_token(user_id: str) -> str:
    """Signed token carrying the user id; validity is checked on read."""
    return serializer.dumps({"uid": user_id})


def read_session_token(token: str, max_age: int = SESSION_MAX_AGE_SECONDS) -> str | None:
    """Return the user id inside a valid token, else None."""
    try:
        data = serializer.loads(token, max_age=max_age)
    except itsdangerous.SignatureExpired:
        logger.info("⌛ Session token expired")
        return None
    except itsdangerous.BadSignature:
        return None
    return data.get("uid") if isinstance(data, dict) else None


# ---------------------------------------------------------------
# 👥 Demo accounts
# ---------------------------------------------------------------
DEMO_USERS = [
    {
        "id": "demo-user-1",
        "email": "admin@gpt.com",
        "password": "admin123",
        "first_name": "Admin",
        "last_name": "User",
        "is_admin": True,
    },
    {
        "id": "demo-user-2",
        "email": "user@gpt.com",
        "password": "user123",
        "first_name": "Demo",
        "last_name": "User",
        "is_admin": False,
    },
]


def find_demo_user(email: str, password: str) -> dict | None:
    for account in DEMO_USERS:
        if account["email"] == (email or "").strip().lower() and account["password"] == password:
            return account
    return None


# ---------------------------------------------------------------
# ☁️ Supabase provider
# ---------------------------------------------------------------
def _supabase_headers(token: str | None = None) -> dict:
    headers = {"apikey": SUPABASE_SERVICE_KEY or ""}
    if token:
        headers["Authorization"] = f"Bearer {token}"
    return headers


async def fetch_supabase_user(token: str) -> dict | None:
    """Verify an access token with Supabase; return its user object."""
    try:
        async with httpx.AsyncClient(timeout=10.0) as client:
            resp = await client.get(f"{SUPABASE_URL}/auth/v1/user", headers=_supabase_headers(token))
    except httpx.HTTPError as e:
        logger.error(f"❌ Supabase user lookup failed: {e}")
        return None

    if resp.status_code != 200:
        logger.info(f"🚫 Supabase rejected token [{resp.status_code}]")
        return None
    return resp.json()


async def supabase_sign_in(email: str, password: str) -> dict | None:
    """Password grant; returns {"access_token", "user", ...} or None."""
    try:
        async with httpx.AsyncClient(timeout=10.0) as client:
            resp = await client.post(
                f"{SUPABASE_URL}/auth/v1/token",
                params={"grant_type": "password"},
                json={"email": email, "password": password},
                headers=_supabase_headers(),
            )
    except httpx.HTTPError as e:
        logger.error(f"❌ Supabase sign-in failed: {e}")
        return None

    if resp.status_code != 200:
        return None
    return resp.json()


async def supabase_sign_out(token: str) -> None:
    try:
        async with httpx.AsyncClient(timeout=10.0) as client:
            await client.post(f"{SUPABASE_URL}/auth/v1/logout", headers=_supabase_headers(token))
    except httpx.HTTPError as e:
        logger.warning(f"⚠️ Supabase sign-out failed: {e}")


async def sync_supabase_user(session: AsyncSession, claims: dict) -> User:
    """Create the local user row for a Supabase identity."""
    metadata = claims.get("user_metadata") or {}
    email = claims.get("email")
    return await upsert_user(
        session,
        claims["id"],
        email=email,
        first_name=metadata.get("first_name") or (email.split("@")[0] if email else None),
        last_name=metadata.get("last_name") or "",
        profile_image_url=metadata.get("avatar_url"),
    )


# ---------------------------------------------------------------
# 🔑 FastAPI dependencies
# ---------------------------------------------------------------
def extract_token(request: Request) -> str | None:
    """Bearer header first, then the session cookie."""
    header = request.headers.get("authorization") or ""
    if header.lower().startswith("bearer "):
        token = header[7:].strip()
        if token:
            return token
    return request.cookies.get(SESSION_COOKIE)


async def get_current_user_id(
    request: Request,
    session: AsyncSession = Depends(get_session),
) -> str:
    """Authenticated subject id. The local user row may still be missing."""
    token = extract_token(request)
    if not token:
        raise Unauthorized()

    if AUTH_PROVIDER == "supabase":
        claims = await fetch_supabase_user(token)
        if not claims or not claims.get("id"):
            raise Unauthorized()
        if await get_user_by_id(session, claims["id"]) is None:
            await sync_supabase_user(session, claims)
        return claims["id"]

    user_id = read_session_token(token)
    if not user_id:
        raise Unauthorized("Session expired or invalid")
    return user_id


async def get_current_user(
    user_id: str = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_session),
) -> User:
    user = await get_user_by_id(session, user_id)
    if user is None:
        raise NotFound("User not found")
    return user


async def require_admin(user: User = Depends(get_current_user)) -> User:
    if not is_admin(user):
        raise Forbidden("Admin access required")
    return user
