"""Signed credential codec.

Issues and validates the HMAC-signed JWTs that carry a user's tenant
binding: ``{userId, tenantId, email, role}`` plus ``iat`` and ``exp``.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING, Any

from jose import JWTError, jwt
from jose.exceptions import ExpiredSignatureError, JWTClaimsError

if TYPE_CHECKING:
    from shared_kernel.auth.observability import JWTValidatorProbe

USER_ID_CLAIM = "userId"
TENANT_ID_CLAIM = "tenantId"
EMAIL_CLAIM = "email"
ROLE_CLAIM = "role"

_REQUIRED_CLAIMS = (USER_ID_CLAIM, TENANT_ID_CLAIM, EMAIL_CLAIM, ROLE_CLAIM)


@dataclass(frozen=True)
class TokenClaims:
    """Validated credential claims."""

    user_id: str
    tenant_id: str
    email: str
    role: str


class InvalidTokenError(Exception):
    """Raised when credential validation fails."""

    pass


class JWTValidator:
    """Issues and validates HMAC-signed credentials.

    Validation checks signature, expiry and the presence of every tenant
    binding claim. Claim contents are not checked against persisted state
    here; that is the identity verifier's job.
    """

    def __init__(
        self,
        secret: str,
        probe: JWTValidatorProbe,
        algorithm: str = "HS256",
        expires_in: timedelta = timedelta(days=7),
    ):
        """Initialize the validator.

        Args:
            secret: Shared signing secret.
            probe: Observability probe for logging events.
            algorithm: HMAC algorithm (default: HS256).
            expires_in: Lifetime of issued credentials (default: 7 days).
        """
        if not secret:
            raise ValueError("secret must not be empty")
        self._secret = secret
        self._probe = probe
        self._algorithm = algorithm
        self._expires_in = expires_in

    def issue_token(self, claims: TokenClaims, now: datetime | None = None) -> str:
        """Sign a credential for the given claims.

        Args:
            claims: The tenant binding to sign.
            now: Issue time (default: current UTC time).

        Returns:
            The encoded JWT string.
        """
        issued_at = now or datetime.now(tz=timezone.utc)
        payload: dict[str, Any] = {
            USER_ID_CLAIM: claims.user_id,
            TENANT_ID_CLAIM: claims.tenant_id,
            EMAIL_CLAIM: claims.email,
            ROLE_CLAIM: claims.role,
            "iat": int(issued_at.timestamp()),
            "exp": int((issued_at + self._expires_in).timestamp()),
        }
        token = jwt.encode(payload, self._secret, algorithm=self._algorithm)
        self._probe.token_issued(user_id=claims.user_id, tenant_id=claims.tenant_id)
        return token

    def validate_token(self, token: str) -> TokenClaims:
        """Validate a credential and return its claims.

        Args:
            token: The JWT string.

        Returns:
            TokenClaims containing the validated claims.

        Raises:
            InvalidTokenError: If the token is malformed, expired, badly signed,
                or missing a required claim.
        """
        try:
            unverified_header = jwt.get_unverified_header(token)
        except JWTError as e:
            self._probe.token_validation_failed(reason=f"Malformed token: {e}")
            raise InvalidTokenError(f"Invalid token format: {e}") from e

        if not unverified_header:
            self._probe.token_validation_failed(reason="Missing token header")
            raise InvalidTokenError("Invalid token: missing header")

        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[self._algorithm],
                options={
                    "verify_signature": True,
                    "verify_exp": True,
                    "verify_iat": True,
                    "require_exp": True,
                    "verify_aud": False,
                },
            )
        except ExpiredSignatureError as e:
            self._probe.token_validation_failed(reason="Token expired")
            raise InvalidTokenError("Token has expired") from e
        except JWTClaimsError as e:
            self._probe.token_validation_failed(reason=f"Claims error: {e}")
            raise InvalidTokenError(f"Invalid token claims: {e}") from e
        except JWTError as e:
            error_msg = str(e).lower()
            if "signature" in error_msg:
                self._probe.token_validation_failed(reason="Invalid signature")
                raise InvalidTokenError("Invalid token signature") from e
            self._probe.token_validation_failed(reason=f"JWT error: {e}")
            raise InvalidTokenError(f"Invalid token: {e}") from e

        missing = [
            name
            for name in _REQUIRED_CLAIMS
            if not isinstance(payload.get(name), str) or not payload[name].strip()
        ]
        if missing:
            self._probe.token_validation_failed(
                reason=f"Missing claims: {', '.join(missing)}"
            )
            raise InvalidTokenError(f"Missing required claims: {', '.join(missing)}")

        claims = TokenClaims(
            user_id=payload[USER_ID_CLAIM],
            tenant_id=payload[TENANT_ID_CLAIM],
            email=payload[EMAIL_CLAIM],
            role=payload[ROLE_CLAIM],
        )
        self._probe.token_validated(user_id=claims.user_id)
        return claims
