"""
Authentication and authorization dependencies.

The bearer token identifies the user; role and display name are always read
from the user row so a stale token cannot carry a revoked role.
"""

import logging
from typing import Callable

from fastapi import Depends
from jwt import PyJWTError
from sqlalchemy.orm import Session

from ...auth import decode_access_token, oauth2_scheme
from ...core.exceptions import ForbiddenException, UnauthorizedException
from ...principal import Actor, ActorRole
from ...repositories.factory import RepositoryFactory
from .database import get_db

logger = logging.getLogger(__name__)


def get_current_actor(token: str = Depends(oauth2_scheme), db: Session = Depends(get_db)) -> Actor:
    """
    Resolve the bearer token to an ``Actor``.

    Raises:
        UnauthorizedException: If the token is invalid or the user is missing or inactive
    """
    try:
        payload = decode_access_token(token)
    except PyJWTError as e:
        logger.warning(f"JWT validation error: {str(e)}")
        raise UnauthorizedException("Could not validate credentials", code="INVALID_TOKEN")

    user_id = payload.get("sub")
    if not isinstance(user_id, str) or not user_id:
        logger.warning("Token payload missing 'sub' field")
        raise UnauthorizedException("Could not validate credentials", code="INVALID_TOKEN")

    user = RepositoryFactory.create_user_repository(db).get_active(user_id)
    if user is None:
        raise UnauthorizedException("User not found or inactive", code="USER_INACTIVE")
    return Actor(id=user.id, role=ActorRole(user.role), name=user.display_name)


def require_roles(*roles: ActorRole) -> Callable[..., Actor]:
    """Dependency factory admitting only actors with one of ``roles``."""
    allowed = frozenset(roles)

    def dependency(actor: Actor = Depends(get_current_actor)) -> Actor:
        if actor.role not in allowed:
            raise ForbiddenException(
                "You do not have permission to perform this action",
                code="ROLE_NOT_ALLOWED",
                details={"required_roles": sorted(r.value for r in allowed)},
            )
        return actor

    return dependency


require_client = require_roles(ActorRole.CLIENT)
require_vendor = require_roles(ActorRole.VENDOR)
require_admin = require_roles(ActorRole.ADMIN)
