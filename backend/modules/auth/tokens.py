"""
Session token issuing and verification.

Tokens are HS256-signed JWTs carrying the subject id and email. Time checks
are done against an injectable clock instead of PyJWT's own, so that tests
can move time without sleeping.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Awaitable, Callable, Optional

import jwt
from pydantic import ValidationError as PydanticValidationError

from shared.exceptions import AuthenticationError
from shared.models import AuthenticatedUser

from .exceptions import (
    AccountDeactivatedError,
    ExpiredTokenError,
    InvalidTokenError,
    TokenConfigurationError,
    TokenNotActiveError,
)
from .models import IssuedToken, TokenClaims, TokenVerification, VerificationFailure

logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _from_timestamp(value: Optional[int]) -> Optional[datetime]:
    if value is None:
        return None
    return datetime.fromtimestamp(value, tz=timezone.utc)


def failure_to_error(verification: TokenVerification) -> AuthenticationError:
    """Map a failed verification onto the error the API reports for it."""
    if verification.failure == VerificationFailure.EXPIRED:
        return ExpiredTokenError()
    if verification.failure == VerificationFailure.NOT_YET_VALID:
        return TokenNotActiveError()
    return InvalidTokenError()


class TokenService:
    """
    Issues and verifies signed session tokens.

    Args:
        secret: HMAC signing secret
        algorithm: JWT algorithm (HS256)
        issuer: Value written to and required in the iss claim
        audience: Value written to and required in the aud claim
        ttl: Default token lifetime
        clock: Returns the current UTC time
    """

    def __init__(
        self,
        secret: Optional[str],
        algorithm: str = "HS256",
        issuer: str = "accounts-api",
        audience: str = "accounts-client",
        ttl: timedelta = timedelta(hours=24),
        clock: Callable[[], datetime] = _utc_now,
    ):
        self._secret = secret
        self._algorithm = algorithm
        self._issuer = issuer
        self._audience = audience
        self._ttl = ttl
        self._clock = clock

    @property
    def ttl(self) -> timedelta:
        return self._ttl

    def now(self) -> datetime:
        return self._clock()

    def _require_secret(self) -> str:
        if not self._secret:
            raise TokenConfigurationError()
        return self._secret

    def issue(self, user_id: str, email: str, ttl: Optional[timedelta] = None) -> IssuedToken:
        """
        Sign a token for the given subject.

        Raises:
            TokenConfigurationError: If no signing secret is configured
        """
        secret = self._require_secret()
        lifetime = self._ttl if ttl is None else ttl
        issued_at = int(self._clock().timestamp())
        expires_in = int(lifetime.total_seconds())
        expires_at = issued_at + expires_in

        payload = {
            "sub": user_id,
            "email": email,
            "iat": issued_at,
            "exp": expires_at,
            "iss": self._issuer,
            "aud": self._audience,
        }
        token = jwt.encode(payload, secret, algorithm=self._algorithm)

        return IssuedToken(
            token=token,
            expires_in=expires_in,
            expires_at=_from_timestamp(expires_at),
        )

    def verify(self, token: str) -> TokenVerification:
        """
        Check signature, claims and validity window.

        Never raises for a bad token; the failure kind is reported in the
        result instead.

        Raises:
            TokenConfigurationError: If no signing secret is configured
        """
        secret = self._require_secret()

        try:
            payload = jwt.decode(
                token,
                secret,
                algorithms=[self._algorithm],
                audience=self._audience,
                issuer=self._issuer,
                options={
                    "verify_exp": False,
                    "verify_nbf": False,
                    "verify_iat": False,
                    "require": ["sub", "exp", "iat"],
                },
            )
            claims = TokenClaims(**payload)
        except jwt.InvalidSignatureError:
            return TokenVerification(
                failure=VerificationFailure.SIGNATURE_INVALID,
                reason="Signature verification failed",
            )
        except jwt.InvalidTokenError as e:
            return TokenVerification(failure=VerificationFailure.MALFORMED, reason=str(e))
        except PydanticValidationError:
            return TokenVerification(
                failure=VerificationFailure.MALFORMED,
                reason="Token is missing required claims",
            )

        now = self._clock().timestamp()
        if claims.nbf is not None and now < claims.nbf:
            return TokenVerification(
                failure=VerificationFailure.NOT_YET_VALID,
                reason="Token not active yet",
            )
        if now >= claims.exp:
            return TokenVerification(
                failure=VerificationFailure.EXPIRED,
                reason="Token has expired",
            )

        return TokenVerification(
            identity=AuthenticatedUser(
                id=claims.sub,
                email=claims.email,
                issued_at=_from_timestamp(claims.iat),
                expires_at=_from_timestamp(claims.exp),
            )
        )

    def authenticate(self, token: str) -> AuthenticatedUser:
        """
        Verify a token and return its identity.

        Raises:
            InvalidTokenError, ExpiredTokenError, TokenNotActiveError
        """
        verification = self.verify(token)
        if not verification.is_valid:
            raise failure_to_error(verification)
        return verification.identity

    def decode_unverified(self, token: str) -> Optional[TokenClaims]:
        """Read claims without checking the signature. None if unreadable."""
        try:
            payload = jwt.decode(token, options={"verify_signature": False})
            return TokenClaims(**payload)
        except (jwt.InvalidTokenError, PydanticValidationError):
            return None

    async def refresh(
        self,
        token: str,
        is_active: Callable[[str], Awaitable[bool]],
    ) -> IssuedToken:
        """
        Exchange a currently valid token for a new one.

        Args:
            token: The token presented by the client
            is_active: Reports whether the subject's account is still active

        Raises:
            InvalidTokenError, ExpiredTokenError, TokenNotActiveError
            AccountDeactivatedError: If the subject is no longer active
        """
        identity = self.authenticate(token)

        if not await is_active(identity.id):
            logger.info("Refresh refused for inactive user %s", identity.id)
            raise AccountDeactivatedError(identity.id)

        return self.issue(identity.id, identity.email)
