"""Per-profile cache of MFA session credentials."""

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ValidationError, field_validator

from ..errors import CacheCorruptError


logger = logging.getLogger(__name__)


def parse_expiration(value: str) -> datetime:
    """Parse an ISO-8601 expiration, treating naive timestamps as UTC."""
    expiration = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if expiration.tzinfo is None:
        expiration = expiration.replace(tzinfo=timezone.utc)
    return expiration


class CachedSession(BaseModel):
    """Temporary credentials as stored on disk."""

    access_key_id: str
    secret_access_key: str
    session_token: str
    expiration: str

    @field_validator("expiration", mode="before")
    @classmethod
    def _expiration_to_iso(cls, value):
        # boto3 hands back a datetime, the aws cli a string
        if isinstance(value, datetime):
            return value.isoformat()
        return value

    @property
    def expires_at(self) -> datetime:
        return parse_expiration(self.expiration)


class SessionCache:
    """Reads and writes the cached session of one profile."""

    def __init__(self, sessions_dir: Path, profile: str = "default"):
        self.sessions_dir = Path(sessions_dir)
        self.profile = profile
        self._session: Optional[CachedSession] = None

    @property
    def path(self) -> Path:
        return self.sessions_dir / self.profile

    def exists(self) -> bool:
        return self.path.exists()

    def load(self) -> CachedSession:
        """Load the cached session, reading the file only once.

        Raises:
            FileNotFoundError: If there is no cached session
            CacheCorruptError: If the file is not a valid session record
        """
        if self._session is not None:
            return self._session

        with open(self.path, "r") as f:
            raw = f.read()

        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            raise CacheCorruptError(self.path, f"invalid JSON: {e}") from e

        if not isinstance(data, dict):
            raise CacheCorruptError(self.path, "expected a JSON object")

        try:
            session = CachedSession(**data)
            parse_expiration(session.expiration)
        except ValidationError as e:
            raise CacheCorruptError(self.path, f"invalid session record: {e}") from e
        except ValueError as e:
            raise CacheCorruptError(self.path, f"unparseable expiration: {e}") from e

        self._session = session
        return session

    def save(self, session: CachedSession) -> None:
        """Write the session as pretty JSON and forget the loaded copy."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w") as f:
            json.dump(session.model_dump(), f, indent=2)
        self._session = None
        logger.debug(f"Saved session for profile '{self.profile}' to {self.path}, expires {session.expiration}")

    def has_valid_cache(self) -> bool:
        """Check for a cached session that has not expired yet.

        Raises:
            CacheCorruptError: If the cached file cannot be parsed
        """
        if not self.exists():
            return False

        expiration = self.load().expires_at
        return datetime.now(timezone.utc) < expiration

    def needs_refresh(self) -> bool:
        return not self.has_valid_cache()
