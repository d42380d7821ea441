# ===============================================================
# handlers/core.py  (🔑 login / logout / current user)
# ===============================================================
import logging
from fastapi import APIRouter, Depends, Request, Response
from sqlalchemy.ext.asyncio import AsyncSession

from config import AUTH_PROVIDER, SESSION_MAX_AGE_SECONDS
from db import get_session
from errors import Unauthorized
from helpers import get_user_by_id, upsert_user
from models import User
from schemas import LoginIn, LoginOut, UserOut
from utils.auth import (
    SESSION_COOKIE,
    extract_token,
    find_demo_user,
    get_current_user,
    issue_session_token,
    supabase_sign_in,
    supabase_sign_out,
    sync_supabase_user,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post("/login", response_model=LoginOut)
async def login(body: LoginIn, response: Response, session: AsyncSession = Depends(get_session)):
    if AUTH_PROVIDER == "supabase":
        data = await supabase_sign_in(body.email, body.password)
        if not data or not data.get("user"):
            raise Unauthorized("Invalid email or password")
        user = await get_user_by_id(session, data["user"]["id"])
        if user is None:
            user = await sync_supabase_user(session, data["user"])
        token = data["access_token"]
    else:
        account = find_demo_user(body.email, body.password)
        if account is None:
            logger.warning("🚫 Failed demo login attempt")
            raise Unauthorized("Invalid email or password")
        user = await upsert_user(
            session,
            account["id"],
            email=account["email"],
            first_name=account["first_name"],
            last_name=account["last_name"],
            is_admin=account["is_admin"],
        )
        token = issue_session_token(user.id)

    response.set_cookie(
        SESSION_COOKIE,
        token,
        httponly=True,
        max_age=SESSION_MAX_AGE_SECONDS,
        samesite="lax",
    )
    logger.info(f"🔓 Login → user_id={user.id}")
    return {"user": user, "token": token}


@router.post("/logout")
async def logout(request: Request, response: Response):
    token = extract_token(request)
    if token and AUTH_PROVIDER == "supabase":
        await supabase_sign_out(token)
    response.delete_cookie(SESSION_COOKIE)
    return {"success": True}


@router.get("/user", response_model=UserOut)
async def current_user(user: User = Depends(get_current_user)):
    return user


def register_handlers(app):
    app.include_router(router)
