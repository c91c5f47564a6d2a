"""Error types raised by the Firestore client and helpers that classify them."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from datetime import timedelta


class StatusCode(enum.IntEnum):
    """Status codes a Firestore RPC can finish with."""

    OK = 0
    CANCELLED = 1
    UNKNOWN = 2
    INVALID_ARGUMENT = 3
    DEADLINE_EXCEEDED = 4
    NOT_FOUND = 5
    ALREADY_EXISTS = 6
    PERMISSION_DENIED = 7
    RESOURCE_EXHAUSTED = 8
    FAILED_PRECONDITION = 9
    ABORTED = 10
    OUT_OF_RANGE = 11
    UNIMPLEMENTED = 12
    INTERNAL = 13
    UNAVAILABLE = 14
    DATA_LOSS = 15
    UNAUTHENTICATED = 16

    @property
    def label(self) -> str:
        """The code's name in CamelCase, e.g. ``AlreadyExists``."""
        return "".join(part.capitalize() for part in self.name.split("_"))


_RETRYABLE_CODES = frozenset(
    {
        StatusCode.ABORTED,
        StatusCode.CANCELLED,
        StatusCode.UNAVAILABLE,
        StatusCode.RESOURCE_EXHAUSTED,
    }
)


@dataclass(frozen=True)
class ErrorPublicGenericDetails:
    """Details of an error that are safe to show to callers."""

    code: str


@dataclass(frozen=True)
class InvalidParametersPublicDetails:
    """Describes which parameter was invalid and why."""

    field: str
    error: str


class FirestoreError(Exception):
    """Base class of every error the client raises."""


class FirestoreSystemError(FirestoreError):
    """An internal or system level failure."""

    def __init__(self, public: ErrorPublicGenericDetails, message: str) -> None:
        self.public = public
        self.message = message
        super().__init__(f"Firestore system/internal error: {message}")


class FirestoreDatabaseError(FirestoreError):
    """A general database failure, possibly worth retrying."""

    def __init__(
        self, public: ErrorPublicGenericDetails, details: str, retry_possible: bool
    ) -> None:
        self.public = public
        self.details = details
        self.retry_possible = retry_possible
        super().__init__(f"Database general error occurred: {details}")


class FirestoreDataConflictError(FirestoreError):
    """The data being written conflicts with existing data."""

    def __init__(self, public: ErrorPublicGenericDetails, details: str) -> None:
        self.public = public
        self.details = details
        super().__init__(f"Database conflict error occurred: {details}")


class FirestoreDataNotFoundError(FirestoreError):
    """The requested data does not exist."""

    def __init__(
        self, public: ErrorPublicGenericDetails, data_detail_message: str
    ) -> None:
        self.public = public
        self.data_detail_message = data_detail_message
        super().__init__(f"Data not found error occurred: {public!r}")


class FirestoreInvalidParametersError(FirestoreError):
    """A parameter given to the client was not valid."""

    def __init__(self, public: InvalidParametersPublicDetails) -> None:
        self.public = public
        super().__init__(f"Data not found error occurred: {public!r}")


class _SerializationError(FirestoreError):
    def __init__(self, message: str) -> None:
        self.public = ErrorPublicGenericDetails(str(message))
        super().__init__(f"Invalid serialization: {self.public!r}")


class FirestoreSerializeError(_SerializationError):
    """A value could not be converted into a Firestore value."""


class FirestoreDeserializeError(_SerializationError):
    """A Firestore value could not be converted into the requested type."""


class FirestoreNetworkError(FirestoreError):
    """A failure while talking to the service."""

    def __init__(self, public: ErrorPublicGenericDetails, message: str) -> None:
        self.public = public
        self.message = message
        super().__init__(f"Network error: {message}")


class BackoffError(Exception):
    """Wraps an error with the decision whether the operation may be retried."""

    def __init__(
        self,
        error: BaseException,
        *,
        permanent: bool,
        retry_after: timedelta | None = None,
    ) -> None:
        if permanent and retry_after is not None:
            raise ValueError("a permanent error cannot carry a retry delay")
        self.error = error
        self.is_permanent = permanent
        self.retry_after = retry_after
        super().__init__(str(error))
        self.__cause__ = error

    @property
    def is_transient(self) -> bool:
        return not self.is_permanent

    @classmethod
    def permanent(cls, error: BaseException) -> BackoffError:
        """An error that must not be retried."""
        return cls(error, permanent=True)

    @classmethod
    def transient(
        cls, error: BaseException, retry_after: timedelta | None = None
    ) -> BackoffError:
        """An error that may be retried, optionally after a given delay."""
        return cls(error, permanent=False, retry_after=retry_after)


class FirestoreErrorInTransaction(FirestoreError):
    """An error raised by user code running inside a transaction."""

    def __init__(self, transaction_id: bytes, source: BaseException) -> None:
        self.transaction_id = bytes(transaction_id)
        self.source = source
        super().__init__(
            "Error occurred inside run transaction scope "
            f"{self.transaction_id.hex()}: {source}"
        )
        self.__cause__ = source

    @staticmethod
    def permanent(transaction_id: bytes, source: BaseException) -> BackoffError:
        """Abort the transaction without retrying."""
        return BackoffError.permanent(FirestoreErrorInTransaction(transaction_id, source))

    @staticmethod
    def transient(transaction_id: bytes, source: BaseException) -> BackoffError:
        """Ask for the transaction to be retried."""
        return BackoffError.transient(FirestoreErrorInTransaction(transaction_id, source))

    @staticmethod
    def retry_after(
        transaction_id: bytes, source: BaseException, retry_after: timedelta
    ) -> BackoffError:
        """Ask for the transaction to be retried after a delay in whole milliseconds."""
        millis = max(retry_after, timedelta(0)) // timedelta(milliseconds=1)
        return BackoffError.transient(
            FirestoreErrorInTransaction(transaction_id, source),
            timedelta(milliseconds=millis),
        )


def _status_text(code: StatusCode, message: str) -> str:
    return f'status: {code.label}, message: "{message}"'


def _from_unknown(
    code: StatusCode, message: str, source: BaseException | None
) -> FirestoreError:
    generic = ErrorPublicGenericDetails(code.label)
    if isinstance(source, ConnectionError):
        return FirestoreDatabaseError(
            ErrorPublicGenericDetails("CONNECTION_CLOSED"),
            f"Hyper error: {source}",
            True,
        )
    if isinstance(source, TimeoutError):
        return FirestoreDatabaseError(
            ErrorPublicGenericDetails("CONNECTION_TIMEOUT"),
            f"Hyper error: {source}",
            True,
        )
    if isinstance(source, OSError):
        return FirestoreDatabaseError(generic, f"Hyper error: {source}", False)
    return FirestoreDatabaseError(generic, _status_text(code, message), False)


def error_from_status(
    code: StatusCode | int, message: str, source: BaseException | None = None
) -> FirestoreError:
    """Classify a failed RPC status into the matching error."""
    code = StatusCode(code)
    generic = ErrorPublicGenericDetails(code.label)
    text = _status_text(code, message)
    if code is StatusCode.ALREADY_EXISTS:
        return FirestoreDataConflictError(generic, text)
    if code is StatusCode.NOT_FOUND:
        return FirestoreDataNotFoundError(generic, text)
    if code in _RETRYABLE_CODES:
        return FirestoreDatabaseError(generic, text, True)
    if code is StatusCode.UNKNOWN:
        return _from_unknown(code, message, source)
    return FirestoreDatabaseError(generic, text, False)


def error_from_parse_error(message: str) -> FirestoreDeserializeError:
    """Error for a date or time that could not be parsed."""
    return FirestoreDeserializeError(f"Parse error: {message}")


def error_from_out_of_range(message: str) -> FirestoreInvalidParametersError:
    """Error for a duration that cannot be represented."""
    return FirestoreInvalidParametersError(
        InvalidParametersPublicDetails(
            field=f"Out of range: {message}",
            error="duration",
        )
    )


def error_from_send_failure(message: str) -> FirestoreNetworkError:
    """Error for a write request that could not be sent on its stream."""
    return FirestoreNetworkError(
        ErrorPublicGenericDetails("SEND_STREAM_ERROR"),
        f"Send stream error: {message}",
    )


def firestore_err_to_backoff(err: FirestoreError) -> BackoffError:
    """Retry database errors that allow it; everything else is permanent."""
    if isinstance(err, FirestoreDatabaseError) and err.retry_possible:
        return BackoffError.transient(err)
    return BackoffError.permanent(err)