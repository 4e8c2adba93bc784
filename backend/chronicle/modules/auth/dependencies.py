from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from typing import Dict, Any
import uuid

from chronicle.api.deps import get_gateway
from chronicle.core.logging_config import set_user_id
from chronicle.core.security import ACCESS_TOKEN_TYPE, decode_token
from chronicle.db.gateway import PersistenceGateway, make_key
from chronicle.models.user import User, UserRole

security = HTTPBearer()


async def get_token_payload(
    credentials: HTTPAuthorizationCredentials = Depends(security)
) -> Dict[str, Any]:
    """
    Verified claims of the bearer token.

    Tokens are issued by the identity provider; ``sub`` is the account id
    the profile is stored under.
    """
    payload = decode_token(credentials.credentials)

    if payload.get("type") != ACCESS_TOKEN_TYPE:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token type"
        )

    user_id = payload.get("sub")
    if not user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token payload"
        )

    # Validate user_id is a valid UUID format
    try:
        uuid.UUID(user_id)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid user ID format"
        )

    return payload


async def get_token_subject(payload: Dict[str, Any] = Depends(get_token_payload)) -> str:
    """Account id of an authenticated caller that may not have a profile yet"""
    return payload["sub"]


async def get_current_user(
    user_id: str = Depends(get_token_subject),
    gateway: PersistenceGateway = Depends(get_gateway)
) -> User:
    """Get current authenticated user"""
    user = await gateway.get(make_key("users", user_id))

    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found"
        )

    set_user_id(user.id)
    return user


def require_role(role: UserRole):
    """Dependency admitting only users with the given role"""
    async def dependency(current_user: User = Depends(get_current_user)) -> User:
        if current_user.role != role:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"{role.value.capitalize()} access required"
            )
        return current_user

    dependency.__name__ = f"get_current_{role.value}"
    return dependency


get_current_student = require_role(UserRole.STUDENT)
get_current_supervisor = require_role(UserRole.SUPERVISOR)
get_current_admin = require_role(UserRole.ADMIN)
