"""
Request-scoped dependencies: the current principal and the permission gate.

Authentication happens upstream. The gateway forwards the authenticated
principal id in the ``X-Principal-Id`` header; the legacy role label is
read from the principal record, never from the request.
"""

import logging
from typing import Annotated, Callable
from fastapi import Depends, Request
from sqlalchemy.orm import Session

from dare_backend.api.exceptions import ForbiddenException, UnauthorizedException
from dare_backend.database import get_db
from dare_backend.permissions.admin import AccessAdministration
from dare_backend.permissions.errors import UnknownPrincipal
from dare_backend.permissions.principal import Principal
from dare_backend.permissions.resolver import AuthorizationResolver

logger = logging.getLogger(__name__)

PRINCIPAL_HEADER = "X-Principal-Id"


def get_resolver(db: Session = Depends(get_db)) -> AuthorizationResolver:
    return AuthorizationResolver(db)


def get_admin(db: Session = Depends(get_db)) -> AccessAdministration:
    return AccessAdministration(db)


def get_current_principal(
    request: Request,
    resolver: Annotated[AuthorizationResolver, Depends(get_resolver)],
) -> Principal:

    principal_id = request.headers.get(PRINCIPAL_HEADER)

    if not principal_id:
        raise UnauthorizedException()

    try:
        return resolver.load_principal(principal_id)
    except UnknownPrincipal:
        logger.warning(f"Request from unknown principal {principal_id}")
        raise UnauthorizedException()


def require_permission(resource: str, action: str) -> Callable[..., Principal]:
    """Dependency that lets the request through only if the principal holds (resource, action)"""

    def gate(
        principal: Annotated[Principal, Depends(get_current_principal)],
        resolver: Annotated[AuthorizationResolver, Depends(get_resolver)],
    ) -> Principal:
        if not resolver.check(principal, resource, action):
            # the response never names the grants that would have allowed access
            raise ForbiddenException()
        return principal

    return gate


def require_admin(principal: Annotated[Principal, Depends(get_current_principal)]) -> Principal:
    if not principal.is_admin:
        raise ForbiddenException()
    return principal
