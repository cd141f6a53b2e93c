"""Profile configuration read through the aws cli."""

import logging
import subprocess
from typing import Dict, List, Optional

from ..errors import AwsCliNotFoundError


logger = logging.getLogger(__name__)


class ProfileConfig:
    """Reads profile properties with ``aws configure get``.

    Every call to the aws cli costs a few hundred milliseconds, so each
    property is looked up at most once per instance.
    """

    def __init__(self, profile: str = "default", aws_cli: str = "aws", mfa_serial_override: Optional[str] = None):
        """Initialize profile config.

        Args:
            profile: AWS profile name
            aws_cli: aws executable to run
            mfa_serial_override: MFA device that takes precedence over ``mfa_serial``
        """
        self.profile = profile
        self.aws_cli = aws_cli
        self.mfa_serial_override = mfa_serial_override
        self._values: Dict[str, Optional[str]] = {}

    def _command(self, prop: str) -> List[str]:
        return [self.aws_cli, "configure", "get", prop, "--profile", self.profile]

    def get(self, prop: str) -> Optional[str]:
        """Get a configured property of the profile.

        Args:
            prop: Property name, e.g. ``aws_access_key_id``

        Returns:
            The stripped value, or None when it is not set
        """
        if prop in self._values:
            return self._values[prop]

        try:
            result = subprocess.run(self._command(prop), capture_output=True, text=True)
        except FileNotFoundError as e:
            raise AwsCliNotFoundError(self.aws_cli) from e

        # aws configure get exits 1 with no output for unset properties
        value = result.stdout.strip() or None
        logger.debug(f"aws configure get {prop} (profile '{self.profile}'): {'set' if value else 'not set'}")
        self._values[prop] = value
        return value

    @property
    def mfa_serial(self) -> Optional[str]:
        """MFA device identifier, from the override or the profile."""
        return self.mfa_serial_override or self.get("mfa_serial")

    def is_mfa_required(self) -> bool:
        """Check whether this tool should handle MFA for the profile.

        Only profiles with an MFA device and static access keys qualify.
        Profiles using ``role_arn`` or ``source_profile`` already get MFA
        support from the aws cli, and injecting session credentials would
        break it.
        """
        if not self.mfa_serial:
            return False

        has_keys = bool(self.get("aws_access_key_id") and self.get("aws_secret_access_key"))
        if not has_keys:
            return False

        if self.get("role_arn") or self.get("source_profile"):
            logger.debug(f"Profile '{self.profile}' assumes a role, leaving MFA to the aws cli")
            return False

        return True
