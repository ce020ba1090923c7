from datetime import UTC, datetime, timedelta
from typing import Any

from jose import JWTError, jwt

from vagas_api.domain.errors import AuthenticationError


class JWTIdentityResolver:
    """Resolve a bearer token to the caller's user id (`sub` claim)."""

    def __init__(self, secret_key: str, algorithm: str = "HS256", audience: str = "") -> None:
        if not secret_key:
            raise ValueError("secret_key must not be empty")
        self._secret_key = secret_key
        self._algorithm = algorithm
        self._audience = audience or None

    def resolve(self, token: str) -> str:
        try:
            payload = jwt.decode(
                token,
                self._secret_key,
                algorithms=[self._algorithm],
                audience=self._audience,
                options={"verify_aud": self._audience is not None},
            )
        except JWTError as exc:
            raise AuthenticationError(f"Token validation failed: {exc}") from exc

        subject = payload.get("sub")
        if not isinstance(subject, str) or not subject.strip():
            raise AuthenticationError("Token has no subject")
        return subject

    def issue(self, user_id: str, expires_in: timedelta = timedelta(hours=1)) -> str:
        """Create a signed token for `user_id`; used by local tooling and tests."""
        claims: dict[str, Any] = {"sub": user_id, "exp": datetime.now(UTC) + expires_in}
        if self._audience is not None:
            claims["aud"] = self._audience
        return jwt.encode(claims, self._secret_key, algorithm=self._algorithm)
