from __future__ import annotations

from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any

import pytest

from aws_mfa_secure.config import Settings
from aws_mfa_secure.credentials.cache import CachedSession
from aws_mfa_secure.credentials.exchangers import SessionTokenResponse, TokenExchanger
from aws_mfa_secure.credentials.profile import ProfileConfig

MFA_ENV_VARS = (
    "AWS_PROFILE",
    "AWS_MFA_SERIAL",
    "AWS_MFA_TOKEN",
    "AWS_MFA_TTL",
    "AWS_MFA_SECURE_HOME",
    "AWS_MFA_SECURE_MODE",
    "AWS_MFA_SECURE_AWS_CLI",
    "AWS_MFA_SECURE_CONFIG",
    # field names are accepted as env names as well
    "MFA_SERIAL",
    "MFA_TOKEN",
    "MFA_TTL",
    "EXCHANGE_MODE",
    "AWS_CLI",
)

MFA_SERIAL = "arn:aws:iam::111111111111:mfa/alice"

STATIC_KEYS = {
    "aws_access_key_id": "AKIAEXAMPLEEXAMPLE",
    "aws_secret_access_key": "long-lived-secret",
    "mfa_serial": MFA_SERIAL,
    "region": "us-west-2",
}


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    # Never read or write the real ~/.aws from tests.
    for name in MFA_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("AWS_MFA_SECURE_HOME", str(tmp_path))


def make_session(expiration: datetime | None = None, suffix: str = "") -> CachedSession:
    expires_at = expiration or (datetime.now(timezone.utc) + timedelta(hours=1))
    return CachedSession(
        access_key_id=f"ASIAEXAMPLEEXAMPLE{suffix}",
        secret_access_key=f"session-secret{suffix}",
        session_token=f"session-token{suffix}",
        expiration=expires_at.isoformat(),
    )


class StaticProfileConfig(ProfileConfig):
    """ProfileConfig backed by a dict instead of the aws cli."""

    def __init__(self, values: dict[str, str], profile: str = "default", mfa_serial_override: str | None = None):
        super().__init__(profile=profile, mfa_serial_override=mfa_serial_override)
        self.values = values
        self.lookups: list[str] = []

    def get(self, prop: str) -> str | None:
        self.lookups.append(prop)
        return self.values.get(prop)


class FakeExchanger(TokenExchanger):
    """Returns queued responses or raises queued exceptions, in order."""

    def __init__(self, outcomes: list[Any]):
        self.outcomes = list(outcomes)
        self.calls: list[dict[str, Any]] = []

    def get_session_token(self, serial_number, token_code, duration_seconds=None):
        self.calls.append(
            {"serial_number": serial_number, "token_code": token_code, "duration_seconds": duration_seconds}
        )
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, BaseException):
            raise outcome
        return SessionTokenResponse(credentials=outcome)


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(AWS_MFA_SECURE_HOME=str(tmp_path))
