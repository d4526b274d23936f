"""Error taxonomy for disbursements.

Every failure raised by a settlement backend is a FaucetError carrying one
ErrorKind. Upstream providers only give us free-form text, so the kind is
derived by substring matching against the ordered tables below. The first
matching entry wins; anything unmatched is GENERIC.
"""

from enum import Enum
from typing import Iterable


class ErrorKind(str, Enum):
    """Closed set of disbursement failure kinds."""

    INVALID_ADDRESS = "invalid_address"
    INSUFFICIENT_FUNDS = "insufficient_funds"
    PENDING_TRANSACTION = "pending_transaction"
    PROVIDER_UNAVAILABLE = "provider_unavailable"
    ENCODING_ERROR = "encoding_error"
    GENERIC = "generic"


class FaucetError(Exception):
    """Raised by settlement backends with a classified kind."""

    def __init__(self, kind: ErrorKind, detail: str = ""):
        self.kind = kind
        self.detail = detail
        super().__init__(f"{kind.value}: {detail}" if detail else kind.value)


class ConfigurationError(Exception):
    """Raised when startup configuration is inconsistent."""

    pass


class CredentialError(Exception):
    """Raised when macaroons or signing keys cannot be loaded."""

    pass


# (substring, kind) - order matters
LIGHTNING_ERRORS: tuple[tuple[str, ErrorKind], ...] = (
    ("not valid for this network", ErrorKind.INVALID_ADDRESS),
    ("address", ErrorKind.INVALID_ADDRESS),
    ("insufficient", ErrorKind.INSUFFICIENT_FUNDS),
)

GAS_ESTIMATION_ERRORS: tuple[tuple[str, ErrorKind], ...] = (
    ("insufficient", ErrorKind.INSUFFICIENT_FUNDS),
)

SUBMISSION_ERRORS: tuple[tuple[str, ErrorKind], ...] = (
    ("replacement", ErrorKind.PENDING_TRANSACTION),
    ("already known", ErrorKind.PENDING_TRANSACTION),
    ("insufficient funds", ErrorKind.INSUFFICIENT_FUNDS),
)


def classify_error_text(
    text: str,
    table: Iterable[tuple[str, ErrorKind]],
    default: ErrorKind = ErrorKind.GENERIC,
) -> ErrorKind:
    """Map upstream error text to an ErrorKind.

    Matching is case-insensitive.

    Args:
        text: Raw error message or response body
        table: Ordered (substring, kind) pairs
        default: Kind returned when nothing matches

    Returns:
        The kind of the first matching entry, or default
    """
    lowered = (text or "").lower()
    for needle, kind in table:
        if needle in lowered:
            return kind
    return default


def classify_exception(
    error: BaseException,
    table: Iterable[tuple[str, ErrorKind]],
    default: ErrorKind = ErrorKind.GENERIC,
    unavailable: tuple[type[BaseException], ...] = (),
) -> FaucetError:
    """Wrap an arbitrary exception into a classified FaucetError.

    Connection-level failures (OSError and any of `unavailable`) are
    PROVIDER_UNAVAILABLE; everything else goes through the text table.
    """
    if isinstance(error, FaucetError):
        return error

    detail = str(error) or type(error).__name__

    if isinstance(error, (OSError,) + unavailable):
        return FaucetError(ErrorKind.PROVIDER_UNAVAILABLE, detail)

    return FaucetError(classify_error_text(detail, table, default), detail)
