import logging
from typing import Optional
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession

from clubify.core.access import CallerContext
from clubify.core.database import get_session
from clubify.core.exceptions import AuthenticationError
from clubify.core.jwt_auth import jwt_manager
from clubify.club.crud.users import get_user_by_id, load_grants

logger = logging.getLogger(__name__)

security = HTTPBearer(
    scheme_name="Bearer token",
    description="Access token issued for a Clubify user",
    auto_error=False,
)


async def get_current_caller(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: AsyncSession = Depends(get_session),
) -> CallerContext:
    """Authenticate the bearer token and load the caller's grants"""
    if credentials is None or not credentials.credentials.strip():
        raise AuthenticationError()

    user_id = jwt_manager.get_user_id(credentials.credentials)

    user = await get_user_by_id(db, user_id)
    if user is None:
        logger.warning(f"Token for unknown user {user_id}")
        raise AuthenticationError()

    grants = await load_grants(db, user_id)
    return CallerContext(user_id=user_id, grants=tuple(grants))
