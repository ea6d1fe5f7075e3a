"""Request-scoped dependencies shared by the routers."""

from fastapi import Header

from storefront.errors import UnauthorizedError
from storefront.identity import get_identity_provider
from storefront.utils.logging import add_context


def current_user(authorization: str | None = Header(default=None)) -> str:
    """Resolve the bearer token to a user id or reject the request with 401."""
    if not authorization or not authorization.startswith("Bearer "):
        raise UnauthorizedError("Not authenticated")

    user_id = get_identity_provider().resolve(authorization.split(" ", 1)[1])
    if not user_id:
        raise UnauthorizedError("Invalid or expired token")

    add_context(user_id=user_id)
    return user_id
