# blade/core/tokens.py
"""
Access token codec.

A token secret looks like ``blade_<48 hex chars>``. Only its SHA-256 hash is
stored; the plain secret is shown to the user exactly once. Lookup is by
exact hash match, so the hash is unsalted and identical across processes.
"""
import asyncio
import hashlib
import logging
import secrets
from typing import NamedTuple

from blade.core.errors import InvalidToken
from blade.core.store import CredentialStore

logger = logging.getLogger("uvicorn.error")

TOKEN_PREFIX = "blade_"
TOKEN_BYTES = 24  # 48 hex characters of randomness
DISPLAY_PREFIX_LENGTH = 12
DISPLAY_ELLIPSIS = "…"

# Usage-timestamp writes still in flight. Holding a reference keeps the
# event loop from garbage-collecting them before they finish.
_pending_usage_writes: set[asyncio.Task] = set()


class TokenSecret(NamedTuple):
    secret: str  # Plain text, return to the caller once and forget
    hash: str    # Stored and used for lookup
    prefix: str  # Non-secret, shown in token listings


def hash_token(secret: str) -> str:
    """Deterministic one-way hash of a token secret (hex-encoded SHA-256 of its UTF-8 bytes)."""
    return hashlib.sha256(secret.encode("utf-8")).hexdigest()


def generate_token_secret() -> TokenSecret:
    """Generate a new bearer secret together with its storage hash and display prefix."""
    secret = TOKEN_PREFIX + secrets.token_hex(TOKEN_BYTES)
    return TokenSecret(
        secret=secret,
        hash=hash_token(secret),
        prefix=secret[:DISPLAY_PREFIX_LENGTH] + DISPLAY_ELLIPSIS,
    )


def get_token_from_headers(authorization: str | None, x_api_key: str | None) -> str | None:
    """
    Pick the presented token: ``Authorization: Bearer <token>`` first, then ``X-API-Key``.
    Blank values count as absent.
    """
    if authorization and authorization.lower().startswith("bearer "):
        token = authorization.split(" ", 1)[1].strip()
        return token or None
    if x_api_key:
        return x_api_key.strip() or None
    return None


async def flush_usage_writes() -> None:
    """Wait for outstanding usage-timestamp writes (used on shutdown and in tests)."""
    if _pending_usage_writes:
        await asyncio.gather(*list(_pending_usage_writes), return_exceptions=True)


class TokenCodec:
    def __init__(self, store: CredentialStore):
        self.store = store

    async def validate_access_token(self, presented: str | None) -> str | None:
        """
        Check a presented secret and return the token's scope.

        Returns the scoped space id as a string, or None for an unscoped token.
        Raises InvalidToken when the secret is missing, has the wrong prefix,
        or matches no stored hash. A revoked token is indistinguishable from
        one that never existed.
        """
        if not presented or not presented.startswith(TOKEN_PREFIX):
            raise InvalidToken("Invalid or missing token")

        record = await self.store.get_token_by_hash(hash_token(presented))
        if record is None:
            raise InvalidToken("Invalid or expired token")

        self._dispatch_usage_write(record.id)
        return str(record.space_id) if record.space_id else None

    def _dispatch_usage_write(self, token_id) -> None:
        task = asyncio.create_task(self._record_usage(token_id))
        _pending_usage_writes.add(task)
        task.add_done_callback(_pending_usage_writes.discard)

    async def _record_usage(self, token_id) -> None:
        # Lossy by contract: the request that presented the token never sees this fail
        try:
            await self.store.touch_token(token_id)
        except Exception:
            logger.debug("[tokens] last_used_at update failed for token %s", token_id, exc_info=True)
