"""
JWT token service for authentication.
"""

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

from jose import JWTError, jwt


@dataclass
class TokenPayload:
    """JWT token payload structure."""

    sub: str  # Subject (account id)
    exp: datetime  # Expiration time
    iat: datetime  # Issued at
    type: str  # Token type: "access" or "refresh"
    email: str | None = None
    is_creator: bool = False

    @property
    def user_id(self) -> int | None:
        """Account id parsed from the subject, None if it is not an integer."""
        try:
            return int(self.sub)
        except (TypeError, ValueError):
            return None


class TokenService:
    """Service for creating and validating JWT tokens."""

    def __init__(
        self,
        secret_key: str,
        algorithm: str = "HS256",
        access_token_expire_minutes: int = 60,
        refresh_token_expire_days: int = 7,
    ):
        """
        Initialize the token service.

        Args:
            secret_key: Secret key for signing tokens
            algorithm: JWT algorithm (default: HS256)
            access_token_expire_minutes: Access token expiration in minutes
            refresh_token_expire_days: Refresh token expiration in days
        """
        self._secret_key = secret_key
        self._algorithm = algorithm
        self._access_token_expire_minutes = access_token_expire_minutes
        self._refresh_token_expire_days = refresh_token_expire_days

    @property
    def access_token_expire_seconds(self) -> int:
        return self._access_token_expire_minutes * 60

    def create_access_token(
        self,
        user_id: int | str,
        email: str | None = None,
        is_creator: bool = False,
    ) -> str:
        """
        Create an access token.

        Args:
            user_id: Account id to encode in the token
            email: Optional email to include
            is_creator: Creator role flag to include

        Returns:
            Encoded JWT access token
        """
        now = datetime.now(UTC)
        expire = now + timedelta(minutes=self._access_token_expire_minutes)

        payload = {
            "sub": str(user_id),
            "exp": expire,
            "iat": now,
            "type": "access",
            "is_creator": bool(is_creator),
        }

        if email:
            payload["email"] = email

        return jwt.encode(payload, self._secret_key, algorithm=self._algorithm)

    def create_refresh_token(self, user_id: int | str) -> str:
        """
        Create a refresh token.

        Args:
            user_id: Account id to encode in the token

        Returns:
            Encoded JWT refresh token
        """
        now = datetime.now(UTC)
        expire = now + timedelta(days=self._refresh_token_expire_days)

        payload = {
            "sub": str(user_id),
            "exp": expire,
            "iat": now,
            "type": "refresh",
        }

        return jwt.encode(payload, self._secret_key, algorithm=self._algorithm)

    def create_token_pair(
        self,
        user_id: int | str,
        email: str | None = None,
        is_creator: bool = False,
    ) -> tuple[str, str]:
        """
        Create both access and refresh tokens.

        Returns:
            Tuple of (access_token, refresh_token)
        """
        access_token = self.create_access_token(user_id, email, is_creator)
        refresh_token = self.create_refresh_token(user_id)
        return access_token, refresh_token

    def decode_token(self, token: str) -> TokenPayload | None:
        """
        Decode and validate a JWT token.

        Args:
            token: JWT token to decode

        Returns:
            TokenPayload if valid, None if invalid or expired
        """
        try:
            payload = jwt.decode(
                token,
                self._secret_key,
                algorithms=[self._algorithm],
            )

            for field in ("sub", "exp", "type"):
                if field not in payload:
                    raise JWTError(f"Missing required field: {field}")

            return TokenPayload(
                sub=payload.get("sub"),
                exp=datetime.fromtimestamp(payload.get("exp"), tz=UTC),
                iat=datetime.fromtimestamp(payload.get("iat", 0), tz=UTC),
                type=payload.get("type"),
                email=payload.get("email"),
                is_creator=bool(payload.get("is_creator", False)),
            )
        except JWTError:
            return None

    def verify_access_token(self, token: str) -> TokenPayload | None:
        """Return the payload if the token is a valid access token, else None."""
        payload = self.decode_token(token)
        if payload and payload.type == "access":
            return payload
        return None

    def verify_refresh_token(self, token: str) -> TokenPayload | None:
        """Return the payload if the token is a valid refresh token, else None."""
        payload = self.decode_token(token)
        if payload and payload.type == "refresh":
            return payload
        return None
