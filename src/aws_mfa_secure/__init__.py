"""aws-mfa-secure - cached MFA session credentials for the aws cli and boto3."""

__version__ = "0.1.0"

from .config import Settings, load_settings
from .credentials.manager import MfaSessionManager, SessionAcquisition
from .errors import MfaError, MfaSecureError

__all__ = ["MfaSessionManager", "SessionAcquisition", "Settings", "load_settings", "MfaError", "MfaSecureError"]
