class ClaimsProviderError(Exception):
    pass


class ClaimsConfigurationError(ClaimsProviderError):
    pass


class AssertionSigningError(ClaimsProviderError):
    pass


class ExternalServiceError(ClaimsProviderError):
    """Raised for any failed exchange with Salesforce.

    The message stays generic so response bodies and tokens never reach the
    caller; details are logged by the component that saw them.
    """

    def __init__(self, reason: str | None = None):
        message = "External service error"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)
        self.reason = reason
