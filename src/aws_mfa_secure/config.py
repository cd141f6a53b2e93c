"""Settings for aws-mfa-secure.

Values come from environment variables, optionally filled in by a YAML file
(``~/.aws/aws-mfa-secure.yml`` by default). The environment always wins.
"""

import logging
import os
from pathlib import Path
from typing import Literal, Optional, Union

import yaml
from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from .errors import MfaSecureError


logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "AWS_MFA_SECURE_CONFIG"
DEFAULT_CONFIG_NAME = "aws-mfa-secure.yml"


class Settings(BaseSettings):
    """Runtime settings, one instance per invocation."""

    model_config = SettingsConfigDict(env_ignore_empty=True, extra="ignore", populate_by_name=True)

    aws_profile: str = Field(default="default", validation_alias="AWS_PROFILE")
    mfa_serial: Optional[str] = Field(default=None, validation_alias="AWS_MFA_SERIAL")
    mfa_token: Optional[str] = Field(default=None, validation_alias="AWS_MFA_TOKEN")
    mfa_ttl: Optional[int] = Field(default=None, validation_alias="AWS_MFA_TTL")
    home: Path = Field(default_factory=Path.home, validation_alias="AWS_MFA_SECURE_HOME")
    exchange_mode: Literal["sdk", "shell"] = Field(default="sdk", validation_alias="AWS_MFA_SECURE_MODE")
    aws_cli: str = Field(default="aws", validation_alias="AWS_MFA_SECURE_AWS_CLI")

    @property
    def sessions_dir(self) -> Path:
        """Directory holding one cached session file per profile."""
        return self.home / ".aws" / "aws-mfa-secure-sessions"


def default_config_path(settings: Settings) -> Path:
    """Return the YAML settings path, honouring AWS_MFA_SECURE_CONFIG."""
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        return Path(env_path).expanduser()
    return settings.home / ".aws" / DEFAULT_CONFIG_NAME


def load_settings(config_path: Optional[Union[str, Path]] = None) -> Settings:
    """Build settings from the environment and an optional YAML file.

    Args:
        config_path: YAML file to read (defaults to ``default_config_path``)

    Returns:
        Settings instance

    Raises:
        MfaSecureError: If the environment or the YAML file holds invalid values
    """
    try:
        settings = Settings()
    except ValidationError as e:
        raise MfaSecureError(f"Invalid aws-mfa-secure environment settings: {e}") from e

    path = Path(config_path).expanduser() if config_path else default_config_path(settings)
    if not path.exists():
        if config_path:
            raise MfaSecureError(f"Config file not found: {path}")
        return settings

    try:
        with open(path, "r") as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise MfaSecureError(f"Invalid YAML in config file {path}: {e}") from e

    if not isinstance(data, dict):
        raise MfaSecureError(f"Config file {path} must contain a mapping")

    overrides = {}
    for key, value in data.items():
        field = Settings.model_fields.get(key)
        if field is None:
            logger.warning(f"Ignoring unknown setting '{key}' in {path}")
            continue
        if key in settings.model_fields_set:
            logger.debug(f"Setting '{key}' comes from the environment, ignoring {path}")
            continue
        overrides[field.validation_alias] = value

    if not overrides:
        return settings

    logger.debug(f"Loaded {len(overrides)} setting(s) from {path}")
    try:
        return Settings(**overrides)
    except ValidationError as e:
        raise MfaSecureError(f"Invalid settings in config file {path}: {e}") from e
