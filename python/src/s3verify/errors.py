"""Error taxonomy for s3verify.

Every failure inside a test step is raised as one of these exceptions and
surfaces at the step boundary unchanged.
"""


class S3VerifyError(Exception):
    """Base class for all harness errors.

    Attributes:
        message: Human-readable error description.
    """

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ConstructionError(S3VerifyError):
    """A request could not be built (unreadable payload, bad identifiers)."""


class TransportError(S3VerifyError):
    """The transport failed to execute a request."""


class VerificationError(S3VerifyError):
    """The response violates the expected protocol contract.

    Attributes:
        expected: The expected value, when the check compares values.
        actual: The observed value, when the check compares values.
    """

    def __init__(self, message: str, expected: object = None, actual: object = None) -> None:
        super().__init__(message)
        self.expected = expected
        self.actual = actual


class RegistryError(S3VerifyError):
    """Required state from an earlier step is missing from the registry."""


# -- Common pre-defined errors ------------------------------------------------


class UnexpectedStatus(VerificationError):
    """The response status code differs from the expected one."""

    def __init__(self, expected: int, actual: int, code: str | None = None) -> None:
        message = f"Unexpected Response Status Code: wanted {expected}, got {actual}"
        if code:
            message += f" ({code})"
        super().__init__(
            message,
            expected=expected,
            actual=actual,
        )


class MissingHeader(VerificationError):
    """A required response header is absent."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Missing required response header: {name}", expected=name)
        self.name = name


class EmptyPartition(RegistryError):
    """A registry partition has no entries yet."""

    def __init__(self, kind: str, partition: str) -> None:
        super().__init__(f"No {kind} registered in partition '{partition}'")
        self.partition = partition
