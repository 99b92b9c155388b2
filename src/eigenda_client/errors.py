"""Custom exception classes for the EigenDA client."""


class EigenDAClientError(Exception):
    """Base class for EigenDA client errors."""
    pass


class TransportError(EigenDAClientError):
    """The disperser could not be invoked or answered with a failure.

    The message is the transport's error output, unchanged.
    """

    def __init__(self, message: str, method: str = None):
        self.method = method
        super().__init__(message)


class MalformedResponseError(EigenDAClientError):
    """A disperser response could not be parsed into the expected structure."""
    pass


class ProofValidationError(MalformedResponseError):
    """A parsed verification proof violates a structural invariant."""
    pass


class BlobNotConfirmedError(EigenDAClientError):
    """A confirmation-only field was read from a blob status that is not confirmed."""

    def __init__(self, result):
        self.result = result
        super().__init__(f"Blob status is {result}, confirmation data is only available once CONFIRMED")


class ConfigurationError(EigenDAClientError):
    """Configuration error."""
    pass


class PollTimeoutError(EigenDAClientError):
    """Status polling exhausted its attempt or time budget."""

    def __init__(self, attempts: int, last_status=None):
        self.attempts = attempts
        self.last_status = last_status
        super().__init__(f"Blob did not reach a terminal status after {attempts} polls")


class PollCancelledError(EigenDAClientError):
    """Status polling was cancelled by the caller."""
    pass
