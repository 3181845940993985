"""
Error types for commsgate.

Separates the three expected failure kinds (missing configuration, provider
delivery failure, OTP mismatch) from unexpected internal errors.
"""


class CommsGateError(Exception):
    """Base class for all commsgate errors"""
    pass


class ConfigurationError(CommsGateError):
    """Raised when provider credentials or sender identities are not configured"""
    pass


class DeliveryError(CommsGateError):
    """Raised when a provider rejects or fails to deliver a message"""

    def __init__(self, message: str, provider: str = ""):
        super().__init__(message)
        self.provider = provider


class VerificationError(CommsGateError):
    """Raised when a submitted OTP does not match the stored one"""
    pass
