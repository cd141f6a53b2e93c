"""MFA session credential handling."""

from .cache import CachedSession, SessionCache
from .exchangers import (
    SdkTokenExchanger,
    SessionTokenResponse,
    ShellTokenExchanger,
    TokenExchanger,
    underscore_keys
)
from .manager import AcquisitionStatus, MfaSessionManager, SessionAcquisition
from .profile import ProfileConfig
from .prompt import MfaCodePrompt

__all__ = [
    "AcquisitionStatus",
    "CachedSession",
    "MfaCodePrompt",
    "MfaSessionManager",
    "ProfileConfig",
    "SdkTokenExchanger",
    "SessionAcquisition",
    "SessionCache",
    "SessionTokenResponse",
    "ShellTokenExchanger",
    "TokenExchanger",
    "underscore_keys"
]
