"""MFA code prompt."""

import logging
import os
import sys
from typing import Optional, TextIO

import click


logger = logging.getLogger(__name__)

TOKEN_ENV_VAR = "AWS_MFA_TOKEN"


class MfaCodePrompt:
    """Supplies MFA codes, from a one-time code or from the terminal.

    A one-time code (``AWS_MFA_TOKEN``) is handed out exactly once; a retry
    after it failed falls back to the interactive prompt.
    """

    def __init__(self, one_time_code: Optional[str] = None, input_stream: Optional[TextIO] = None):
        self._one_time_code = one_time_code
        self.input_stream = input_stream

    @property
    def has_one_time_code(self) -> bool:
        return bool(self._one_time_code)

    def _consume_one_time_code(self) -> str:
        code = self._one_time_code
        self._one_time_code = None
        # keep the stale code away from child processes too
        os.environ.pop(TOKEN_ENV_VAR, None)
        return code.strip()

    def __call__(self, profile: str, mfa_device: str) -> str:
        """Get an MFA code for the profile's device."""
        if self._one_time_code:
            logger.debug(f"Using one-time MFA code from {TOKEN_ENV_VAR} for profile '{profile}'")
            return self._consume_one_time_code()

        click.echo("Please provide your MFA code: ", err=True, nl=False)
        stream = self.input_stream or sys.stdin
        line = stream.readline()
        if not line:
            logger.warning(f"No MFA code read for device {mfa_device}, input is closed")
        return line.strip()
