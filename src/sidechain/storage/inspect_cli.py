from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import replace
from typing import Any, List, Optional

from sidechain.env import load_dotenv_if_present
from sidechain.runtime.store_config import load_store_config, log_level_value
from sidechain.storage.errors import BlockNotFoundError, StoreError
from sidechain.storage.file_store import FileStore
from sidechain.storage.store_logging import log_event

_log = logging.getLogger("sidechain.cli")

EXIT_OK = 0
EXIT_NOT_FOUND = 1
EXIT_STORE_ERROR = 2


def _parse_args(argv: List[str]) -> argparse.Namespace:
    ap = argparse.ArgumentParser(description="Inspect a side-chain block/event store (read-only)")
    ap.add_argument("--config", dest="config_path", default=None, help="JSON/YAML store config file")
    ap.add_argument("--store-dir", dest="store_dir", default=None, help="Overrides store_dir from config/env")

    sub = ap.add_subparsers(dest="command", required=True)

    p = sub.add_parser("blocks", help="List stored block numbers")
    p.add_argument("--max-latest", dest="max_latest", type=int, default=None)

    sub.add_parser("latest", help="Print the latest committed block")

    p = sub.add_parser("block", help="Print one block")
    p.add_argument("block_number", type=int)

    p = sub.add_parser("events", help="Print join/part events for a block range (inclusive)")
    p.add_argument("from_block", type=int)
    p.add_argument("to_block", type=int, nargs="?", default=None)

    p = sub.add_parser("member", help="Print a member entry from the latest (or given) block")
    p.add_argument("address")
    p.add_argument("--block", dest="block_number", type=int, default=None)

    sub.add_parser("state", help="Print the operator state document")

    return ap.parse_args(argv)


def _print(obj: Any) -> None:
    print(json.dumps(obj, indent=2))


def _run(store: FileStore, args: argparse.Namespace) -> int:
    cmd = args.command

    if cmd == "blocks":
        _print(store.list_block_numbers(args.max_latest))
        return EXIT_OK

    if cmd == "latest":
        block = store.get_latest_block()
        if block is None:
            print("No blocks committed yet", file=sys.stderr)
            return EXIT_NOT_FOUND
        _print(block)
        return EXIT_OK

    if cmd == "block":
        try:
            _print(store.load_block(args.block_number))
        except BlockNotFoundError:
            print(f"No block {args.block_number}", file=sys.stderr)
            return EXIT_NOT_FOUND
        return EXIT_OK

    if cmd == "events":
        _print(store.load_events(args.from_block, args.to_block))
        return EXIT_OK

    if cmd == "member":
        try:
            member = store.find_member(args.address, args.block_number)
        except BlockNotFoundError:
            print(f"No block {args.block_number}", file=sys.stderr)
            return EXIT_NOT_FOUND
        if member is None:
            print(f"{args.address} not found", file=sys.stderr)
            return EXIT_NOT_FOUND
        _print(member)
        return EXIT_OK

    # argparse restricts command to the subparsers above
    _print(store.load_state())
    return EXIT_OK


def main(argv: Optional[List[str]] = None) -> int:
    args = _parse_args(sys.argv[1:] if argv is None else argv)

    load_dotenv_if_present()
    try:
        cfg = load_store_config(config_path=args.config_path)
        if args.store_dir:
            cfg = replace(cfg, store_dir=str(args.store_dir))
    except (OSError, ValueError) as e:
        logging.basicConfig(stream=sys.stderr, level=logging.INFO, format="%(message)s")
        log_event(_log, "cli_config_error", level=logging.ERROR, config_path=args.config_path, err=str(e))
        print(f"ERROR: config: {e}", file=sys.stderr)
        return EXIT_STORE_ERROR

    # Logs go to stderr so stdout stays pipeable JSON.
    logging.basicConfig(stream=sys.stderr, level=log_level_value(cfg), format="%(message)s")

    try:
        return _run(FileStore(cfg), args)
    except StoreError as e:
        log_event(_log, "cli_store_error", level=logging.ERROR, code=e.code, reason=e.reason, path=e.path)
        print(f"ERROR: {e.code}: {e.reason}", file=sys.stderr)
        return EXIT_STORE_ERROR


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
