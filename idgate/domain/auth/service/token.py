"""Token service: whitelist-aware access tokens and signed OAuth state."""

import hashlib
import hmac
import json
import logging
import secrets
import time
from base64 import urlsafe_b64decode, urlsafe_b64encode
from datetime import UTC, datetime, timedelta

import jwt
from pydantic import ValidationError as PydanticValidationError

from idgate.config import JwtConfig
from idgate.domain.auth.model.claims import AccessClaims
from idgate.domain.auth.model.state import OAuthState
from idgate.domain.auth.model.user import User
from idgate.domain.auth.service.whitelist import WhitelistService
from idgate.domain.shared.error import InvalidTokenError
from idgate.domain.shared.service import Service

logger = logging.getLogger(__name__)

AUDIENCE = "authenticated"


def _b64encode(raw: bytes) -> str:
    return urlsafe_b64encode(raw).rstrip(b"=").decode()


def _b64decode(text: str) -> bytes:
    return urlsafe_b64decode(text + "=" * (-len(text) % 4))


class TokenService(Service):
    """Issues and verifies access tokens.

    - Access tokens are JWTs (HS256 by default) carrying identity claims and a
      ``whitelisted`` flag computed once at issuance. The flag is trusted until
      the token expires; removing an email from the whitelist does not revoke
      tokens already handed out.
    - OAuth state is a JSON payload signed with HMAC-SHA256 using the JWT secret.
    """

    _config: JwtConfig
    _whitelist: WhitelistService
    _state_expire_seconds: int = 600

    async def issue(self, user: User) -> str:
        """Create a signed access token for a user."""
        whitelisted = await self._whitelist.is_user_authorized(user)
        now = datetime.now(UTC)
        expires_at = now + timedelta(minutes=self._config.access_token_expire_minutes)

        payload = {
            "sub": str(user.id),
            "github_id": user.github_id,
            "github_username": user.github_username,
            "google_id": user.google_id,
            "google_email": user.google_email,
            "admin": user.admin,
            "whitelisted": whitelisted,
            "aud": AUDIENCE,
            "iat": int(now.timestamp()),
            "exp": int(expires_at.timestamp()),
            "jti": secrets.token_hex(16),
        }
        logger.debug("Issuing access token: user_id=%s, whitelisted=%s", user.id, whitelisted)
        return jwt.encode(payload, self._config.secret, algorithm=self._config.algorithm)

    def verify(self, token: str) -> AccessClaims:
        """Validate and decode an access token.

        Raises:
            InvalidTokenError: If the signature, audience or payload is bad, or the token expired
        """
        try:
            payload = jwt.decode(
                token,
                self._config.secret,
                algorithms=[self._config.algorithm],
                audience=AUDIENCE,
            )
        except jwt.ExpiredSignatureError as e:
            raise InvalidTokenError("Token has expired", code="token_expired") from e
        except jwt.InvalidTokenError as e:
            raise InvalidTokenError() from e

        try:
            return AccessClaims.model_validate(payload)
        except PydanticValidationError as e:
            raise InvalidTokenError("Malformed token claims") from e

    @property
    def access_token_expire_seconds(self) -> int:
        return self._config.access_token_expire_minutes * 60

    def create_state(self, state: OAuthState) -> str:
        """Sign an OAuth state as ``payload.signature`` (both base64url, unpadded)."""
        payload = state.model_dump(exclude_none=True)
        payload["nonce"] = secrets.token_urlsafe(16)
        payload["exp"] = int(time.time()) + self._state_expire_seconds
        payload_bytes = json.dumps(payload, separators=(",", ":")).encode()

        signature = hmac.new(self._config.secret.encode(), payload_bytes, hashlib.sha256).digest()
        return f"{_b64encode(payload_bytes)}.{_b64encode(signature)}"

    def parse_state(self, raw: str | None) -> OAuthState:
        """Verify and decode a state string.

        Never fails: a missing, tampered, expired or malformed state yields the
        default state (fresh login returning to "/").
        """
        if not raw:
            return OAuthState()

        try:
            payload_b64, signature_b64 = raw.split(".")
            payload_bytes = _b64decode(payload_b64)
            signature = _b64decode(signature_b64)

            expected = hmac.new(
                self._config.secret.encode(), payload_bytes, hashlib.sha256
            ).digest()
            if not hmac.compare_digest(signature, expected):
                logger.warning("OAuth state signature verification failed")
                return OAuthState()

            payload = json.loads(payload_bytes)
            if not isinstance(payload, dict):
                logger.warning("OAuth state payload is not an object")
                return OAuthState()
            exp = payload.get("exp")
            if not isinstance(exp, int | float) or exp < time.time():
                logger.warning("OAuth state expired")
                return OAuthState()

            return OAuthState.model_validate(payload)
        except ValueError as e:
            # Covers bad base64, bad JSON, wrong part count and failed validation
            logger.warning("OAuth state could not be parsed: %s", e)
            return OAuthState()
