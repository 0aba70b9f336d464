"""CLI entry point.

This script runs one read against the job board contract and writes the result
as JSON to disk.

Examples:
    python run_query.py jobs --out jobs.json
    python run_query.py active --exclude-expired
    python run_query.py employer-jobs --address 0xabc...
    python run_query.py applications --job 0x123...
    python run_query.py stats --out stats.json

Package and object ids come from MINIHUB_* environment variables (or a .env
file). The output is a JSON list (or object) of serialized Pydantic models.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from pathlib import Path
from typing import Any

from minihub.config import load_config
from minihub.errors import ConfigError
from minihub.ledger.rpc import RpcLedgerReader
from minihub.log import get_logger
from minihub.sdk import MiniHub

log = get_logger("run_query")

QUERIES = [
    "jobs",
    "active",
    "employer-jobs",
    "applications",
    "user-applications",
    "users",
    "employers",
    "user",
    "employer",
    "stats",
]


def parse_args() -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Read job board state from the ledger.")
    p.add_argument("query", choices=QUERIES, help="What to read.")
    p.add_argument("--out", type=str, default="-", help="Output JSON file path ('-' for stdout).")
    p.add_argument("--address", type=str, default=None, help="Owner/candidate address for address lookups.")
    p.add_argument("--job", type=str, default=None, help="Job id for 'applications'.")
    p.add_argument("--rpc-url", type=str, default=None, help="Override MINIHUB_RPC_URL.")
    p.add_argument("--env-file", type=str, default=None, help="Load configuration from this .env file.")
    p.add_argument(
        "--exclude-expired",
        action="store_true",
        help="With 'active', also drop jobs whose deadline has passed.",
    )
    return p.parse_args()


def _dump(value: Any) -> Any:
    if value is None:
        return None
    if isinstance(value, list):
        return [_dump(v) for v in value]
    return value.model_dump(mode="json")


async def run(hub: MiniHub, args: argparse.Namespace) -> Any:
    q = args.query
    if q in ("employer-jobs", "user-applications", "user", "employer") and not args.address:
        raise SystemExit(f"'{q}' needs --address")
    if q == "applications" and not args.job:
        raise SystemExit("'applications' needs --job")

    if q == "jobs":
        return await hub.get_all_jobs()
    if q == "active":
        return await hub.get_active_jobs(include_expired=not args.exclude_expired)
    if q == "employer-jobs":
        return await hub.get_jobs_by_employer(args.address)
    if q == "applications":
        return await hub.get_job_applications(args.job)
    if q == "user-applications":
        return await hub.get_user_applications(args.address)
    if q == "users":
        return await hub.get_all_user_profiles()
    if q == "employers":
        return await hub.get_all_employer_profiles()
    if q == "user":
        return await hub.get_user_profile_by_address(args.address)
    if q == "employer":
        return await hub.get_employer_profile_by_address(args.address)
    return await hub.get_statistics()


async def amain(args: argparse.Namespace) -> Any:
    try:
        config = load_config(env_file=args.env_file, rpc_url=args.rpc_url)
    except ConfigError as exc:
        raise SystemExit(str(exc))

    async with RpcLedgerReader(config.rpc_url) as reader:
        hub = MiniHub(reader, config)
        return await run(hub, args)


def main() -> None:
    args = parse_args()
    result = asyncio.run(amain(args))
    text = json.dumps(_dump(result), indent=2, ensure_ascii=False)

    if args.out == "-":
        sys.stdout.write(text + "\n")
        return

    out_path = Path(args.out).expanduser().resolve()
    out_path.parent.mkdir(parents=True, exist_ok=True)
    out_path.write_text(text, encoding="utf-8")

    count = len(result) if isinstance(result, list) else int(result is not None)
    log.info("Wrote %d record(s) to: %s", count, out_path)


if __name__ == "__main__":
    main()
