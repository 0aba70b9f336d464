"""MiniHub ledger access package.

Client-side layer for the MiniHub job board contract:
- `models.py` defines the envelope and record schemas.
- `decode.py` turns ledger envelopes into typed records (fails closed).
- `scanner.py` / `walker.py` rebuild collections the ledger does not index.
- `query.py` is the read API; `transactions.py` builds unsigned calls.
- `ledger/` contains the read primitive implementations (JSON-RPC, in-memory).
"""

from .config import PackageConfig, load_config
from .errors import InvalidParamsError, LedgerError, MiniHubError
from .models import (
    ApplicationProfile,
    EmployerCap,
    EmployerProfile,
    EmployerRegistry,
    Job,
    JobBoard,
    Statistics,
    SubmitResult,
    UserProfile,
    UserRegistry,
)
from .query import MiniHubQueries
from .sdk import MiniHub, create_minihub
from .transactions import MoveCall, TransactionBuilder

__all__ = [
    "PackageConfig",
    "load_config",
    "MiniHubError",
    "LedgerError",
    "InvalidParamsError",
    "ApplicationProfile",
    "EmployerCap",
    "EmployerProfile",
    "EmployerRegistry",
    "Job",
    "JobBoard",
    "Statistics",
    "SubmitResult",
    "UserProfile",
    "UserRegistry",
    "MiniHubQueries",
    "MiniHub",
    "create_minihub",
    "MoveCall",
    "TransactionBuilder",
]
