"""MFA session manager.

Decides whether the cached session of a profile can be used and, when it
cannot, exchanges a fresh MFA code for new session credentials.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional

import boto3
import click

from ..config import Settings, load_settings
from ..errors import (
    AccessDeniedError,
    CacheCorruptError,
    InvalidMfaCodeError,
    MfaError,
    MfaRetriesExhaustedError,
    MfaSecureError,
    UnrecognizedExchangeOutputError,
)
from .cache import CachedSession, SessionCache
from .exchangers import TokenExchanger, create_exchanger
from .profile import ProfileConfig
from .prompt import MfaCodePrompt


logger = logging.getLogger(__name__)

RETRYABLE_ERRORS = (InvalidMfaCodeError, AccessDeniedError, UnrecognizedExchangeOutputError)


class AcquisitionStatus(str, Enum):
    """Outcome of an MFA acquisition."""
    SUCCESS = "success"
    EXHAUSTED = "exhausted"


@dataclass
class SessionAcquisition:
    """Result of ``acquire_session`` / ``ensure_session``.

    ``attempts`` is 0 when a valid cached session was reused.
    """
    status: AcquisitionStatus
    credentials: Optional[CachedSession] = None
    attempts: int = 0
    error: Optional[MfaError] = None

    @property
    def succeeded(self) -> bool:
        return self.status == AcquisitionStatus.SUCCESS


class MfaSessionManager:
    """Manages the MFA session credentials of one profile."""

    MAX_ATTEMPTS = 3

    def __init__(
        self,
        settings: Optional[Settings] = None,
        profile_config: Optional[ProfileConfig] = None,
        cache: Optional[SessionCache] = None,
        exchanger: Optional[TokenExchanger] = None,
        prompt: Optional[MfaCodePrompt] = None
    ):
        """Initialize the session manager.

        Args:
            settings: Runtime settings (``load_settings()`` if omitted)
            profile_config: Profile property reader
            cache: Session cache of the profile
            exchanger: Token exchanger (picked from ``settings.exchange_mode`` if omitted)
            prompt: MFA code source
        """
        self.settings = settings or load_settings()
        self.profile = self.settings.aws_profile
        self.profile_config = profile_config or ProfileConfig(
            profile=self.profile,
            aws_cli=self.settings.aws_cli,
            mfa_serial_override=self.settings.mfa_serial
        )
        self.cache = cache or SessionCache(self.settings.sessions_dir, self.profile)
        self.prompt = prompt or MfaCodePrompt(one_time_code=self.settings.mfa_token)
        self._exchanger = exchanger

    @property
    def exchanger(self) -> TokenExchanger:
        if self._exchanger is None:
            self._exchanger = create_exchanger(self.settings)
            logger.debug(f"Using {self._exchanger.__class__.__name__} for profile '{self.profile}'")
        return self._exchanger

    @property
    def mfa_serial(self) -> Optional[str]:
        return self.profile_config.mfa_serial

    def is_mfa_required(self) -> bool:
        return self.profile_config.is_mfa_required()

    def has_valid_cache(self) -> bool:
        return self.cache.has_valid_cache()

    def needs_refresh(self) -> bool:
        return self.cache.needs_refresh()

    def load(self) -> CachedSession:
        return self.cache.load()

    def save(self, credentials: CachedSession) -> None:
        self.cache.save(credentials)

    def _session_options(self, token_code: str) -> Dict[str, Any]:
        options: Dict[str, Any] = {
            "serial_number": self.mfa_serial,
            "token_code": token_code,
        }
        if self.settings.mfa_ttl is not None:
            options["duration_seconds"] = self.settings.mfa_ttl
        return options

    def acquire_session(self) -> SessionAcquisition:
        """Prompt for MFA codes until STS hands out a session.

        Invalid codes, access denied and unrecognized aws cli output each use
        up one of ``MAX_ATTEMPTS`` attempts. Progress is reported on stderr.

        Returns:
            A SUCCESS acquisition with the new credentials, or EXHAUSTED
        """
        mfa_serial = self.mfa_serial
        if not mfa_serial:
            raise MfaSecureError(f"No MFA device configured for profile '{self.profile}'")

        attempts = 0
        while True:
            token_code = self.prompt(self.profile, mfa_serial)
            try:
                response = self.exchanger.get_session_token(**self._session_options(token_code))
            except RETRYABLE_ERRORS as e:
                attempts += 1
                logger.debug(f"MFA attempt {attempts} for profile '{self.profile}' failed: {e!r}")
                click.echo(f"{e.__class__.__name__}: {e}", err=True)
                click.echo("Incorrect MFA code.  Please try again.", err=True)
                if attempts >= self.MAX_ATTEMPTS:
                    click.echo(f"Giving up after {attempts} retries.", err=True)
                    return SessionAcquisition(AcquisitionStatus.EXHAUSTED, attempts=attempts, error=e)
                continue

            attempts += 1
            logger.info(f"New MFA session for profile '{self.profile}', expires {response.credentials.expiration}")
            return SessionAcquisition(
                AcquisitionStatus.SUCCESS,
                credentials=response.credentials,
                attempts=attempts
            )

    def ensure_session(self) -> SessionAcquisition:
        """Return a valid session, refreshing and saving it when needed.

        A corrupt cache file counts as expired and gets overwritten.
        """
        try:
            refresh = self.needs_refresh()
        except CacheCorruptError as e:
            logger.warning(f"{e}; requesting a new session")
            refresh = True

        if not refresh:
            logger.debug(f"Reusing cached session for profile '{self.profile}'")
            return SessionAcquisition(AcquisitionStatus.SUCCESS, credentials=self.load())

        acquisition = self.acquire_session()
        if acquisition.succeeded:
            self.save(acquisition.credentials)
        return acquisition

    @staticmethod
    def session_environment(credentials: CachedSession) -> Dict[str, str]:
        """Environment variables that make aws tools use the session."""
        return {
            "AWS_ACCESS_KEY_ID": credentials.access_key_id,
            "AWS_SECRET_ACCESS_KEY": credentials.secret_access_key,
            "AWS_SESSION_TOKEN": credentials.session_token,
        }

    def create_boto3_session(self) -> boto3.Session:
        """Create a boto3 session that uses the MFA session when required.

        Raises:
            MfaRetriesExhaustedError: If no MFA code was accepted
        """
        if not self.is_mfa_required():
            return boto3.Session(profile_name=self.profile)

        acquisition = self.ensure_session()
        if not acquisition.succeeded:
            raise MfaRetriesExhaustedError(self.profile, acquisition.attempts)

        credentials = acquisition.credentials
        return boto3.Session(
            aws_access_key_id=credentials.access_key_id,
            aws_secret_access_key=credentials.secret_access_key,
            aws_session_token=credentials.session_token,
            region_name=self.profile_config.get("region")
        )
