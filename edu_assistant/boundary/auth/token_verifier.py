"""
Bearer token verification.

Verifies JWTs issued by the identity backend with the shared signing secret.
Only verification happens here; the service never issues tokens to clients.

Dependencies: python-jose, pydantic, edu_assistant.configs
System role: Credential check for the identity gate
"""

import logging
import uuid
from datetime import datetime, timedelta, timezone

from jose import JWTError, jwt
from pydantic import ValidationError as PydanticValidationError

from edu_assistant.core.exceptions import AuthenticationError
from edu_assistant.models.identity import TokenClaims

logger = logging.getLogger(__name__)

BEARER_PREFIX = "bearer "


def extract_bearer_token(authorization: str | None) -> str:
    """
    Pull the token out of an Authorization header.

    Raises:
        AuthenticationError: Header missing or not a bearer credential
    """
    if not authorization:
        raise AuthenticationError("Missing authorization header")
    if not authorization.lower().startswith(BEARER_PREFIX):
        raise AuthenticationError("Authorization header must use the Bearer scheme")

    token = authorization[len(BEARER_PREFIX):].strip()
    if not token:
        raise AuthenticationError("Missing bearer token")
    return token


class TokenVerifier:
    """Decode and validate signed bearer tokens."""

    def __init__(
        self,
        secret: str,
        algorithm: str = "HS256",
        audience: str | None = None,
    ) -> None:
        self._secret = secret
        self._algorithm = algorithm
        self._audience = audience

    def verify(self, token: str) -> TokenClaims:
        """
        Verify signature, expiry and audience.

        Args:
            token: Encoded JWT

        Returns:
            TokenClaims: Verified claims

        Raises:
            AuthenticationError: Token malformed, expired, or rejected
        """
        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[self._algorithm],
                audience=self._audience,
                options={"verify_aud": self._audience is not None},
            )
        except JWTError as e:
            logger.warning(f"{__name__}:verify - Token rejected: {type(e).__name__}")
            raise AuthenticationError("Invalid or expired token") from e

        try:
            return TokenClaims(**payload)
        except PydanticValidationError as e:
            logger.warning(f"{__name__}:verify - Token claims malformed")
            raise AuthenticationError("Invalid token claims") from e

    def create_token(
        self,
        user_id: uuid.UUID,
        email: str | None = None,
        expires_in: timedelta = timedelta(hours=1),
    ) -> str:
        """Sign a token with this verifier's key (local development and tests)."""
        payload: dict = {
            "sub": str(user_id),
            "exp": datetime.now(timezone.utc) + expires_in,
        }
        if email:
            payload["email"] = email
        if self._audience:
            payload["aud"] = self._audience
        return jwt.encode(payload, self._secret, algorithm=self._algorithm)
