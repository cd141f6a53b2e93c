"""Token exchangers: trade an MFA code for STS session credentials.

Two interchangeable implementations exist, one calling STS through boto3 and
one shelling out to ``aws sts get-session-token``. Both return the same
``SessionTokenResponse`` shape.
"""

import json
import logging
import re
import subprocess
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

import boto3
from botocore.exceptions import ClientError, ParamValidationError
from pydantic import BaseModel, ValidationError

from ..config import Settings
from ..errors import (
    AccessDeniedError,
    AwsCliNotFoundError,
    InvalidMfaCodeError,
    UnrecognizedExchangeOutputError,
)
from .cache import CachedSession


logger = logging.getLogger(__name__)

_ACRONYM_BOUNDARY = re.compile(r"([A-Z\d]+)([A-Z][a-z])")
_CAMEL_BOUNDARY = re.compile(r"([a-z\d])([A-Z])")


def underscore(key: str) -> str:
    """Convert a CamelCase or dashed key to snake_case.

    ``AccessKeyId`` -> ``access_key_id``, ``HTTPStatusCode`` -> ``http_status_code``
    """
    key = _ACRONYM_BOUNDARY.sub(r"\1_\2", key)
    key = _CAMEL_BOUNDARY.sub(r"\1_\2", key)
    return key.replace("-", "_").lower()


def underscore_keys(value: Any) -> Any:
    """Recursively snake_case every dict key in a JSON-like structure."""
    if isinstance(value, dict):
        return {
            underscore(k) if isinstance(k, str) else k: underscore_keys(v)
            for k, v in value.items()
        }
    if isinstance(value, list):
        return [underscore_keys(v) for v in value]
    return value


class SessionTokenResponse(BaseModel):
    """Result of a get-session-token call."""

    credentials: CachedSession


class TokenExchanger(ABC):
    """Exchanges an MFA code for temporary credentials."""

    @abstractmethod
    def get_session_token(
        self,
        serial_number: str,
        token_code: str,
        duration_seconds: Optional[int] = None
    ) -> SessionTokenResponse:
        """Get session credentials for an MFA code.

        Args:
            serial_number: MFA device identifier
            token_code: One-time code from the device
            duration_seconds: Requested session lifetime

        Returns:
            The session token response

        Raises:
            InvalidMfaCodeError: If STS rejects the code
            AccessDeniedError: If STS denies the request
            UnrecognizedExchangeOutputError: If the aws cli output has no credentials
        """


class SdkTokenExchanger(TokenExchanger):
    """Calls STS GetSessionToken through boto3."""

    ERROR_TYPES = {
        "ValidationError": InvalidMfaCodeError,
        "AccessDenied": AccessDeniedError,
    }

    def __init__(self, profile: str = "default", client=None):
        """Initialize the exchanger.

        Args:
            profile: AWS profile whose long-lived keys sign the request
            client: STS client to use instead of creating one
        """
        self.profile = profile
        self._client = client

    @property
    def client(self):
        """STS client for the profile, created on first use."""
        if self._client is None:
            session = boto3.Session(profile_name=self.profile)
            self._client = session.client("sts")
            logger.debug(f"Created STS client for profile '{self.profile}'")
        return self._client

    def get_session_token(
        self,
        serial_number: str,
        token_code: str,
        duration_seconds: Optional[int] = None
    ) -> SessionTokenResponse:
        params: Dict[str, Any] = {
            "SerialNumber": serial_number,
            "TokenCode": token_code,
        }
        if duration_seconds is not None:
            params["DurationSeconds"] = int(duration_seconds)

        try:
            response = self.client.get_session_token(**params)
        except ParamValidationError as e:
            # botocore checks the code length before sending anything
            raise InvalidMfaCodeError(str(e)) from e
        except ClientError as e:
            error = e.response.get("Error", {})
            error_type = self.ERROR_TYPES.get(error.get("Code", "Unknown"))
            if error_type is None:
                raise
            raise error_type(error.get("Message", str(e))) from e

        return SessionTokenResponse(**underscore_keys(response))


class ShellTokenExchanger(TokenExchanger):
    """Runs ``aws sts get-session-token`` and parses its JSON output."""

    def __init__(self, profile: str = "default", aws_cli: str = "aws"):
        self.profile = profile
        self.aws_cli = aws_cli

    def build_command(self, options: Dict[str, Any]) -> List[str]:
        """Render options as ``--key value`` pairs after the base command."""
        command = [self.aws_cli, "sts", "get-session-token", "--profile", self.profile]
        for key, value in options.items():
            command.extend([f"--{key.replace('_', '-')}", str(value)])
        return command

    def get_session_token(
        self,
        serial_number: str,
        token_code: str,
        duration_seconds: Optional[int] = None
    ) -> SessionTokenResponse:
        options: Dict[str, Any] = {
            "serial_number": serial_number,
            "token_code": token_code,
        }
        if duration_seconds is not None:
            options["duration_seconds"] = duration_seconds

        command = self.build_command(options)
        logger.debug(f"Running aws sts get-session-token for profile '{self.profile}'")
        try:
            result = subprocess.run(
                command,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
                errors="replace"
            )
        except FileNotFoundError as e:
            raise AwsCliNotFoundError(self.aws_cli) from e

        output = result.stdout or ""
        if "Credentials" not in output:
            raise UnrecognizedExchangeOutputError(output.strip())

        try:
            data = json.loads(output)
        except json.JSONDecodeError as e:
            raise UnrecognizedExchangeOutputError(output.strip()) from e

        try:
            return SessionTokenResponse(**underscore_keys(data))
        except ValidationError as e:
            raise UnrecognizedExchangeOutputError(output.strip()) from e


def create_exchanger(settings: Settings) -> TokenExchanger:
    """Pick the token exchanger configured by ``exchange_mode``."""
    if settings.exchange_mode == "shell":
        return ShellTokenExchanger(profile=settings.aws_profile, aws_cli=settings.aws_cli)
    return SdkTokenExchanger(profile=settings.aws_profile)
