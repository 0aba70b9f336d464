"""Exception types raised by the SDK.

Read operations on the public facade never raise these; they are caught at the
facade boundary and degraded to empty results. They do surface from the ledger
readers themselves, from configuration loading, and from the write path.
"""

from __future__ import annotations

from enum import IntEnum
from typing import Dict, List, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from .validation import FieldError


class MiniHubError(Exception):
    """Base class for all SDK errors."""


class ConfigError(MiniHubError):
    """Required configuration is missing or malformed."""


class LedgerError(MiniHubError):
    """A ledger read could not be completed."""

    def __init__(self, message: str, method: Optional[str] = None) -> None:
        super().__init__(message)
        self.method = method


class LedgerTransportError(LedgerError):
    """Network or HTTP-level failure talking to the ledger endpoint."""


class LedgerRpcError(LedgerError):
    """The endpoint answered with a JSON-RPC error object."""

    def __init__(self, message: str, method: Optional[str] = None, code: Optional[int] = None) -> None:
        super().__init__(message, method=method)
        self.code = code


class InvalidParamsError(MiniHubError, ValueError):
    """Write parameters failed client-side validation; nothing was built."""

    def __init__(self, errors: List["FieldError"]) -> None:
        self.errors = list(errors)
        summary = "; ".join(f"{e.field}: {e.message}" for e in self.errors)
        super().__init__(f"invalid parameters: {summary}")


class CapabilityNotFoundError(MiniHubError):
    """The employer holds no capability for the job."""


class ApplicationNotFoundError(MiniHubError):
    """The candidate has no application attached to the job."""


class SignerUnavailableError(MiniHubError):
    """A submit was requested but no signer was configured."""


class ContractErrorCode(IntEnum):
    """Abort codes raised by the minihub contract."""

    NOT_AUTHORIZED = 1
    JOB_ALREADY_FILLED = 2
    INVALID_APPLICATION = 3
    DEADLINE_PASSED = 4


CONTRACT_ERROR_MESSAGES: Dict[ContractErrorCode, str] = {
    ContractErrorCode.NOT_AUTHORIZED: "Not authorized",
    ContractErrorCode.JOB_ALREADY_FILLED: "Position already filled",
    ContractErrorCode.INVALID_APPLICATION: "Invalid application",
    ContractErrorCode.DEADLINE_PASSED: "Application deadline has passed",
}
