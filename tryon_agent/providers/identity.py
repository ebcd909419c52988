"""Identity/session providers.

The rest of the package only sees ``IdentityProvider``; the Supabase Auth
implementation is one way to back it.

Two ways of knowing who the user is:

- the remembered session (``current_user``), for a single local caller
  that signs in once and keeps working as that user;
- ``verify(access_token)``, which resolves the user from a bearer token on
  every request. The HTTP API only uses this one.
"""

import asyncio
from abc import ABC, abstractmethod
from typing import Any, Optional

from ..models.schemas import UserSession
from ..utils.errors import AuthenticationError
from ..utils.logger import get_logger

logger = get_logger(__name__)


class IdentityProvider(ABC):
    """Signs users in and out and resolves access tokens."""

    @property
    @abstractmethod
    def current_user(self) -> Optional[UserSession]:
        pass

    @property
    def is_authenticated(self) -> bool:
        return self.current_user is not None

    @property
    def current_user_id(self) -> Optional[str]:
        user = self.current_user
        return user.user_id if user else None

    @abstractmethod
    async def sign_in(self, email: str, password: str, remember: bool = True) -> UserSession:
        """Sign in; ``remember=False`` leaves ``current_user`` untouched."""
        pass

    @abstractmethod
    async def sign_up(self, email: str, password: str, remember: bool = True) -> UserSession:
        pass

    @abstractmethod
    async def sign_out(self, access_token: Optional[str] = None) -> None:
        """End the given token's session, or the remembered one."""
        pass

    @abstractmethod
    async def refresh(self) -> Optional[UserSession]:
        """Re-read the remembered session from the backing service."""
        pass

    @abstractmethod
    async def verify(self, access_token: str) -> UserSession:
        """User owning ``access_token``, or AuthenticationError."""
        pass

    def require_user(self) -> UserSession:
        """Remembered user or AuthenticationError."""
        user = self.current_user
        if user is None:
            raise AuthenticationError("You must be signed in.")
        return user


def _session_from_user(user: Any, access_token: Optional[str] = None) -> UserSession:
    metadata = getattr(user, "user_metadata", None) or {}
    return UserSession(
        user_id=str(user.id),
        email=getattr(user, "email", None) or "",
        first_name=metadata.get("first_name"),
        last_name=metadata.get("last_name"),
        access_token=access_token,
    )


class SupabaseIdentityProvider(IdentityProvider):
    """
    Identity backed by Supabase Auth.

    The supabase client is synchronous; calls run in a worker thread so the
    event loop is not blocked.
    """

    def __init__(self, client: Any):
        """
        Args:
            client: A ``supabase.Client`` used only for auth calls
        """
        self._client = client
        self._user: Optional[UserSession] = None

    @property
    def current_user(self) -> Optional[UserSession]:
        return self._user

    async def sign_in(self, email: str, password: str, remember: bool = True) -> UserSession:
        try:
            response = await asyncio.to_thread(
                self._client.auth.sign_in_with_password,
                {"email": email, "password": password},
            )
        except Exception as e:
            logger.warning("Sign in failed", extra={"error": str(e)})
            raise AuthenticationError(f"Authentication failed: {e}") from e

        if response is None or response.user is None or response.session is None:
            raise AuthenticationError("Authentication failed. Please check your credentials.")

        user = _session_from_user(response.user, response.session.access_token)
        if remember:
            self._user = user
        logger.info("User signed in", extra={"user_id": user.user_id})
        return user

    async def sign_up(self, email: str, password: str, remember: bool = True) -> UserSession:
        try:
            response = await asyncio.to_thread(
                self._client.auth.sign_up,
                {"email": email, "password": password},
            )
        except Exception as e:
            logger.warning("Sign up failed", extra={"error": str(e)})
            raise AuthenticationError(f"Sign up failed: {e}") from e

        if response is None or response.user is None:
            raise AuthenticationError("Sign up failed. Please try again.")
        if response.session is None:
            # Supabase withholds the session until the address is confirmed
            raise AuthenticationError("Sign up is not complete. Confirm your email address first.")

        user = _session_from_user(response.user, response.session.access_token)
        if remember:
            self._user = user
        logger.info("User signed up", extra={"user_id": user.user_id})
        return user

    async def sign_out(self, access_token: Optional[str] = None) -> None:
        try:
            if access_token is None:
                await asyncio.to_thread(self._client.auth.sign_out)
            else:
                await asyncio.to_thread(self._client.auth.admin.sign_out, access_token)
        except Exception as e:
            raise AuthenticationError(f"Sign out failed: {e}") from e

        if access_token is None or (self._user and self._user.access_token == access_token):
            logger.info("User signed out", extra={"user_id": self.current_user_id})
            self._user = None
        else:
            logger.info("Access token revoked")

    async def refresh(self) -> Optional[UserSession]:
        try:
            session = await asyncio.to_thread(self._client.auth.get_session)
        except Exception as e:
            raise AuthenticationError(f"Failed to read session: {e}") from e

        if session is None or getattr(session, "user", None) is None:
            self._user = None
        else:
            self._user = _session_from_user(session.user, getattr(session, "access_token", None))
        return self._user

    async def verify(self, access_token: str) -> UserSession:
        if not access_token:
            raise AuthenticationError("Missing access token.")

        try:
            response = await asyncio.to_thread(self._client.auth.get_user, access_token)
        except Exception as e:
            logger.warning("Access token rejected", extra={"error": str(e)})
            raise AuthenticationError(f"Invalid access token: {e}") from e

        if response is None or getattr(response, "user", None) is None:
            raise AuthenticationError("Invalid access token.")

        return _session_from_user(response.user, access_token)
