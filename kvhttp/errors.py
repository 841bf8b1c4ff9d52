"""kvhttp error types."""


class KVError(Exception):
    """Base class for every error raised by kvhttp."""


class InvalidArgument(KVError, ValueError):
    """Raised before any request is sent when an argument is unusable.

    Covers empty or non-string keys, non-string prefixes, a missing
    base URL, and malformed patch operator payloads.
    """


class NotFound(KVError, KeyError):
    """Raised by the transport when the remote store has no such key.

    ``Client.get`` turns this into its default value; ``has`` and
    ``empty`` turn it into a boolean.
    """

    def __init__(self, key: str) -> None:
        self.key = key
        super().__init__(key)

    def __str__(self) -> str:
        return f"Key not found: {self.key!r}"


class TransportFailure(KVError):
    """Raised when a request fails or the store answers with an error.

    Attributes:
        status: HTTP status code, or None for network-level failures.
        body: Response body text, when one was received.
    """

    def __init__(
        self,
        message: str,
        *,
        status: int | None = None,
        body: str | None = None,
    ) -> None:
        self.status = status
        self.body = body
        super().__init__(message)


class CodecError(TransportFailure):
    """Raised when a value cannot be encoded as JSON text."""


class InvalidValue(KVError):
    """Raised when a field patch targets a stored value that is not an object.

    Attributes:
        key: The key being patched.
        value: The stored value that could not be patched.
    """

    def __init__(self, key: str, value: object) -> None:
        self.key = key
        self.value = value
        super().__init__(
            f"Cannot patch fields of {key!r}: stored value is "
            f"{type(value).__name__}, not an object"
        )
