"""Authentication helpers with fixed default lifetimes."""
import logging
from typing import Optional

from .codec import Lifetime
from .conf import LOGGER_NAME
from .keys import AUTH_KEYS, SecureKey
from .store import ExpiringStore

logger = logging.getLogger(LOGGER_NAME)


class AuthStore:
    """Auth and refresh token storage built on an ExpiringStore.

    Any miss (expired, absent or corrupt token) reads as "not authenticated".

    Args:
        store: the expiring store holding the tokens.
        auth_token_ttl: default auth token lifetime (ms), 24h unless configured.
        refresh_token_ttl: default refresh token lifetime (ms), 7d unless configured.
    """

    def __init__(
        self,
        store: ExpiringStore,
        auth_token_ttl: Optional[Lifetime] = None,
        refresh_token_ttl: Optional[Lifetime] = None,
    ):
        self.store = store
        self.auth_token_ttl = auth_token_ttl or store.config.auth_token_ttl
        self.refresh_token_ttl = refresh_token_ttl or store.config.refresh_token_ttl

    async def set_auth_token(self, token: str, expires_in: Optional[Lifetime] = None) -> None:
        await self.store.set(
            SecureKey.AUTH_TOKEN, token, expires_in or self.auth_token_ttl
        )

    async def get_auth_token(self) -> Optional[str]:
        return await self.store.get(SecureKey.AUTH_TOKEN)

    async def remove_auth_token(self) -> None:
        await self.store.remove(SecureKey.AUTH_TOKEN)

    async def set_refresh_token(self, token: str, expires_in: Optional[Lifetime] = None) -> None:
        await self.store.set(
            SecureKey.REFRESH_TOKEN, token, expires_in or self.refresh_token_ttl
        )

    async def get_refresh_token(self) -> Optional[str]:
        return await self.store.get(SecureKey.REFRESH_TOKEN)

    async def remove_refresh_token(self) -> None:
        await self.store.remove(SecureKey.REFRESH_TOKEN)

    async def clear_auth(self) -> set[str]:
        """Remove auth token, refresh token, user id and session data.

        All four removals are issued even when some fail.

        Returns:
            Names of the keys whose removal failed.
        """
        failed = await self.store.clear_all(AUTH_KEYS)
        if failed:
            logger.error("SecureKV clear_auth left key(s): %s", sorted(failed))
        return failed

    async def is_authenticated(self) -> bool:
        return await self.get_auth_token() is not None
