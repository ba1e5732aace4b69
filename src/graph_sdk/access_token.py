"""
App credentials and access token entities
"""

import hashlib
import hmac
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Optional, Union

from .exceptions import ValidationError


@dataclass(frozen=True)
class App:
    """Immutable app id and secret pair"""
    id: str
    secret: str

    def access_token(self) -> 'AccessToken':
        """Return the app access token in the form id|secret"""
        return AccessToken(f"{self.id}|{self.secret}")


@dataclass(frozen=True)
class AccessToken:
    """Bearer token with optional expiry metadata"""
    value: str
    expires_at: Optional[datetime] = None

    def __post_init__(self):
        if not isinstance(self.value, str):
            raise ValidationError(
                f"Access token value must be a string, got {type(self.value).__name__}"
            )

    def __str__(self) -> str:
        return self.value

    @classmethod
    def coerce(cls, token: Union[str, 'AccessToken']) -> 'AccessToken':
        """
        Wrap a raw string in an AccessToken, or pass an AccessToken through

        Raises:
            ValidationError: If token is any other type
        """
        if isinstance(token, cls):
            return token
        if isinstance(token, str):
            return cls(token)
        raise ValidationError(
            f"Access token must be a string or AccessToken, got {type(token).__name__}"
        )

    def app_secret_proof(self, app_secret: str) -> str:
        """HMAC-SHA256 of the token keyed by the app secret"""
        return hmac.new(
            app_secret.encode('utf-8'),
            self.value.encode('utf-8'),
            hashlib.sha256
        ).hexdigest()

    def is_app_access_token(self) -> bool:
        return '|' in self.value

    def is_long_lived(self, now: Optional[datetime] = None) -> bool:
        """Tokens living longer than two hours are long-lived"""
        if self.expires_at is None:
            return self.is_app_access_token()
        now = now or datetime.now(timezone.utc)
        return (self.expires_at - now).total_seconds() > 2 * 60 * 60

    def is_expired(self, now: Optional[datetime] = None) -> Optional[bool]:
        """Return None when the token carries no expiry"""
        if self.expires_at is None:
            return None
        now = now or datetime.now(timezone.utc)
        return self.expires_at <= now

    @staticmethod
    def expiry_from_seconds(seconds: Any, now: Optional[datetime] = None) -> Optional[datetime]:
        """Translate an `expires_in` value into an absolute datetime"""
        if seconds in (None, '', 0, '0'):
            return None
        now = now or datetime.now(timezone.utc)
        return datetime.fromtimestamp(now.timestamp() + int(seconds), tz=timezone.utc)
