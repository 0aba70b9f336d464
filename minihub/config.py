"""Package configuration.

Identifies the deployed contract and its singleton objects. Values come from the
environment (a ``.env`` file is honoured) so that the same code can point at
testnet, mainnet or a local network.
"""

from __future__ import annotations

import os
from typing import Any, Dict, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError, field_validator

from .errors import ConfigError
from .utils import normalize_address

DEFAULT_CLOCK_ID = "0x6"
MODULE_NAME = "minihub"
DEFAULT_RPC_URL = "https://fullnode.testnet.sui.io:443"

ENV_KEYS: Dict[str, str] = {
    "package_id": "MINIHUB_PACKAGE_ID",
    "job_board_id": "MINIHUB_JOB_BOARD_ID",
    "user_registry_id": "MINIHUB_USER_REGISTRY_ID",
    "employer_registry_id": "MINIHUB_EMPLOYER_REGISTRY_ID",
    "clock_id": "MINIHUB_CLOCK_ID",
    "rpc_url": "MINIHUB_RPC_URL",
    "max_concurrency": "MINIHUB_MAX_CONCURRENCY",
}

_REQUIRED = ("package_id", "job_board_id", "user_registry_id", "employer_registry_id")


class PackageConfig(BaseModel):
    """Ids of the deployed package and its shared objects."""

    package_id: str
    job_board_id: str
    user_registry_id: str
    employer_registry_id: str
    clock_id: str = DEFAULT_CLOCK_ID
    module: str = MODULE_NAME
    rpc_url: str = DEFAULT_RPC_URL
    max_concurrency: int = Field(default=16, ge=1, description="Concurrent per-id fetches during scans.")

    @field_validator("package_id", "job_board_id", "user_registry_id", "employer_registry_id", "clock_id")
    @classmethod
    def _canonical_id(cls, value: str) -> str:
        return normalize_address(value)

    def target(self, function: str) -> str:
        """Fully qualified entry point, e.g. ``0x..::minihub::post_job``."""
        return f"{self.package_id}::{self.module}::{function}"

    def struct_type(self, name: str) -> str:
        return f"{self.package_id}::{self.module}::{name}"


def load_config(env_file: Optional[str] = None, **overrides: Any) -> PackageConfig:
    """Build a PackageConfig from ``MINIHUB_*`` environment variables.

    Keyword overrides win over the environment. Raises ConfigError when a
    required id is missing or any value is malformed.
    """
    if env_file:
        load_dotenv(env_file)
    else:
        load_dotenv()

    values: Dict[str, Any] = {}
    for field, key in ENV_KEYS.items():
        raw = os.environ.get(key, "").strip()
        if raw:
            values[field] = raw
    values.update({k: v for k, v in overrides.items() if v is not None})

    missing = [ENV_KEYS[f] for f in _REQUIRED if not values.get(f)]
    if missing:
        raise ConfigError(f"missing configuration: {', '.join(missing)}")

    try:
        return PackageConfig(**values)
    except ValidationError as exc:
        raise ConfigError(f"invalid configuration: {exc}") from exc
