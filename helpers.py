# ===============================================================
# helpers.py
# ===============================================================
import logging
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession
from models import User, utcnow

logger = logging.getLogger(__name__)


# -------------------------------------------------
# Create or refresh a user from auth-provider claims
# -------------------------------------------------
async def upsert_user(
    session: AsyncSession,
    user_id: str,
    email: str | None = None,
    first_name: str | None = None,
    last_name: str | None = None,
    profile_image_url: str | None = None,
    is_admin: bool | None = None,
) -> User:
    """
    Fetch a User by auth-provider id, creating it if missing.
    Profile fields are refreshed; the spin balance is never touched here.
    Uses the provided AsyncSession and commits.
    """
    result = await session.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()

    if user is None:
        user = User(
            id=user_id,
            email=email,
            first_name=first_name or (email.split("@")[0] if email else None),
            last_name=last_name or "",
            profile_image_url=profile_image_url,
            is_admin=bool(is_admin),
            spins_remaining=0,
            total_spins_used=0,
        )
        session.add(user)
        logger.info(f"👤 New user registered → user_id={user_id}")
    else:
        if email and user.email != email:
            user.email = email
        if first_name:
            user.first_name = first_name
        if last_name is not None and last_name != user.last_name:
            user.last_name = last_name
        if profile_image_url:
            user.profile_image_url = profile_image_url
        if is_admin is not None:
            user.is_admin = is_admin

    await session.commit()
    await session.refresh(user)
    return user


# -------------------------------------------------
# Add spins (purchase)
# -------------------------------------------------
async def add_spins(session: AsyncSession, user: User, count: int) -> User:
    """
    Increment a user's spin balance with a single UPDATE so a concurrent
    spin cannot overwrite it.
    NOTE: This function does not commit; caller must handle commit.
    """
    if count <= 0:
        raise ValueError("count must be positive")

    await session.execute(
        update(User)
        .where(User.id == user.id)
        .values(spins_remaining=User.spins_remaining + count, updated_at=utcnow())
        .execution_options(synchronize_session=False)
    )
    await session.refresh(user)

    logger.info(f"🌀 Added {count} spins → user_id={user.id}, now={user.spins_remaining}")
    return user


# -------------------------------------------------
# Get user by DB ID
# -------------------------------------------------
async def get_user_by_id(session: AsyncSession, user_id) -> User | None:
    result = await session.execute(select(User).where(User.id == user_id))
    return result.scalar_one_or_none()


# -------------------------------------------------
# Check if a user is admin
# -------------------------------------------------
def is_admin(user: User) -> bool:
    """Return True if the user is marked as admin."""
    return getattr(user, "is_admin", False)


# ----------------------------
# 🧩 Mask Sensitive Helper
# ----------------------------
def mask_sensitive(data: str, visible: int = 4) -> str:
    """Mask all but last few visible characters of sensitive data."""
    if not data:
        return ""
    data = str(data)
    if len(data) <= visible:
        return data
    return f"{'*' * (len(data) - visible)}{data[-visible:]}"
