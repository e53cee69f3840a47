"""
Supabase client initialization for CISS Workforce.

Two clients are kept: the anon client verifies user tokens and drives the
phone OTP flow, the service-role client manages claims and storage.
"""

import logging
import base64
import json
import time
from typing import Optional

from supabase import create_client, Client

logger = logging.getLogger(__name__)


def _extract_jwt_payload(token: str) -> dict:
    """Decode JWT payload without signature verification for diagnostics only."""
    try:
        parts = token.split(".")
        if len(parts) != 3:
            return {}
        payload = parts[1]
        padding = "=" * (-len(payload) % 4)
        decoded = base64.urlsafe_b64decode(payload + padding)
        return json.loads(decoded.decode("utf-8"))
    except (ValueError, UnicodeDecodeError):
        return {}


class SupabaseClient:
    """Singleton wrapper for the Supabase clients."""

    _client: Optional[Client] = None
    _admin_client: Optional[Client] = None
    _url: Optional[str] = None
    _key: Optional[str] = None

    @classmethod
    def initialize(cls, url: str, key: str, service_key: Optional[str] = None) -> None:
        """Initialize the Supabase clients."""
        if not url or not key:
            logger.warning("Supabase credentials not provided. Auth will be disabled.")
            return

        cls._url = url
        cls._key = key
        cls._client = create_client(url, key)
        logger.info(f"Supabase client initialized: {url[:30]}...")

        if service_key:
            cls._admin_client = create_client(url, service_key)
            logger.info("Supabase service-role client initialized")
        else:
            logger.warning("SUPABASE_SERVICE_KEY not set: claim management and storage disabled")

    @classmethod
    def get_client(cls) -> Optional[Client]:
        """Get the anon Supabase client instance."""
        return cls._client

    @classmethod
    def get_admin_client(cls) -> Optional[Client]:
        """Get the service-role client (auth admin API, storage)."""
        return cls._admin_client

    @classmethod
    def is_configured(cls) -> bool:
        """Check if Supabase is properly configured."""
        return cls._client is not None


# Global instance
supabase_client = SupabaseClient()


def get_supabase() -> Optional[Client]:
    """Dependency to get Supabase client."""
    return supabase_client.get_client()


def get_supabase_admin() -> Optional[Client]:
    """Dependency to get the service-role Supabase client."""
    return supabase_client.get_admin_client()


def user_to_dict(user) -> dict:
    """Flatten a gotrue User into the fields the app relies on."""
    return {
        "id": user.id,
        "email": user.email,
        "phone": user.phone,
        "email_confirmed": user.email_confirmed_at is not None,
        "created_at": user.created_at,
        "user_metadata": user.user_metadata or {},
        "app_metadata": user.app_metadata or {},
    }


async def verify_jwt(token: str) -> Optional[dict]:
    """
    Verify a JWT token with Supabase.

    Args:
        token: The JWT token to verify

    Returns:
        User data (including app_metadata claims) if valid, None otherwise
    """
    client = supabase_client.get_client()
    if not client:
        return None

    try:
        response = client.auth.get_user(token)
        if response and response.user:
            return user_to_dict(response.user)
    except Exception as e:
        err_msg = str(e)
        if "Invalid API key" in err_msg:
            logger.critical(
                "JWT verification failed: Invalid API key. The SUPABASE_ANON_KEY "
                "used to initialize the client is rejected by Supabase. "
                "Key prefix: %s...",
                (supabase_client._key or "")[:20],
            )
        else:
            payload = _extract_jwt_payload(token)
            token_exp = payload.get("exp")
            if isinstance(token_exp, (int, float)) and int(token_exp) < int(time.time()):
                logger.info(
                    "JWT verification failed: token expired (exp=%s, now=%s)",
                    int(token_exp),
                    int(time.time()),
                )
            else:
                logger.warning("JWT verification failed: %s", e)

    return None
