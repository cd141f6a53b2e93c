"""Exceptions raised by aws-mfa-secure."""


class MfaSecureError(Exception):
    """Base class for aws-mfa-secure errors."""


class MfaError(MfaSecureError):
    """Raised when exchanging an MFA code for session credentials fails."""


class InvalidMfaCodeError(MfaError):
    """STS rejected the MFA code as invalid."""


class AccessDeniedError(MfaError):
    """STS denied the session token request."""


class UnrecognizedExchangeOutputError(MfaError):
    """The aws cli token exchange printed something other than credentials.

    The raw (stripped) cli output is the exception message.
    """

    def __init__(self, output: str):
        self.output = output
        super().__init__(output)


class MfaRetriesExhaustedError(MfaError):
    """Raised when every MFA attempt failed."""

    def __init__(self, profile: str, attempts: int):
        self.profile = profile
        self.attempts = attempts
        super().__init__(f"Giving up on profile '{profile}' after {attempts} retries.")


class CacheCorruptError(MfaSecureError):
    """The cached session file is not valid JSON or has a bad expiration."""

    def __init__(self, path, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Corrupt session cache {path}: {reason}")


class AwsCliNotFoundError(MfaSecureError):
    """The aws command line tool could not be executed."""

    def __init__(self, executable: str):
        self.executable = executable
        super().__init__(f"aws cli not found: '{executable}'. Install it or set AWS_MFA_SECURE_AWS_CLI.")
