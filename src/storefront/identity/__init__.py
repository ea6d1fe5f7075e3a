"""Identity provider registry.

Session and token handling belongs to the surrounding platform. The core only
needs ``resolve(token) -> user_id | None``; the bundled implementation
verifies HS256 bearer tokens.
"""

from storefront.identity.provider import IdentityProvider

_provider: IdentityProvider | None = None


def get_identity_provider() -> IdentityProvider:
    global _provider
    if _provider is None:
        from storefront.identity.provider import JWTIdentityProvider

        _provider = JWTIdentityProvider.from_env()
    return _provider


def set_identity_provider(provider: IdentityProvider) -> None:
    global _provider
    _provider = provider


def reset_identity_provider() -> None:
    global _provider
    _provider = None
