"""Ledger collaborators: read primitive implementations and the signer contract."""

from .base import LedgerReader, Signer
from .memory import InMemoryLedger
from .rpc import RpcLedgerReader

__all__ = ["LedgerReader", "Signer", "InMemoryLedger", "RpcLedgerReader"]
