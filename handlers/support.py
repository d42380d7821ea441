# ===============================================================
# handlers/support.py  (🛠 jewelry customization & inquiries)
# ===============================================================
import logging
from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from db import get_session
from models import SupportRequest, User
from schemas import SupportRequestIn, SupportRequestOut
from utils.auth import get_current_user

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/support-requests", tags=["support"])


@router.post("", response_model=SupportRequestOut)
async def open_request(
    body: SupportRequestIn,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    request = SupportRequest(user_id=user.id, status="pending", **body.model_dump())
    session.add(request)
    await session.commit()
    logger.info(f"📨 Support request {request.id} ({request.type}) opened by user_id={user.id}")
    return request


@router.get("/user", response_model=list[SupportRequestOut])
async def my_requests(
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    result = await session.execute(
        select(SupportRequest)
        .where(SupportRequest.user_id == user.id)
        .order_by(SupportRequest.created_at.desc(), SupportRequest.id.desc())
    )
    return result.scalars().all()


def register_handlers(app):
    app.include_router(router)
