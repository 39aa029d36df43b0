#!/usr/bin/env python3
"""CLI entry point for running single ARM operations."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import Any

from azure.core.exceptions import AzureError

from arm_http.arm_client import ArmClient
from arm_http.config import ClientSettings
from arm_http.exceptions import ArmError


def add_common_args(parser: argparse.ArgumentParser) -> None:
    """Add arguments shared across subcommands."""
    parser.add_argument("uri", help="Absolute resource URI, including api-version")
    # Auth
    parser.add_argument("--client-id", help="Service principal client ID")
    parser.add_argument("--client-secret", help="Service principal client secret")
    parser.add_argument("--tenant-id", help="Azure AD tenant ID")
    parser.add_argument("--verbose", "-v", action="store_true",
                        help="Log every request and poll to stderr")


def _make_client(args: argparse.Namespace) -> ArmClient:
    return ArmClient(
        args.client_id, args.client_secret, args.tenant_id,
        settings=ClientSettings.from_env(),
    )


def _read_body(path: str) -> bytes:
    with open(path, "rb") as f:
        return f.read()


def _print_json(data: Any) -> None:
    print(json.dumps(data, indent=2))


def cmd_get(args: argparse.Namespace) -> None:
    """Print a resource."""
    client = _make_client(args)
    if args.allow_missing:
        resource = client.get_json_object_or_none(args.uri)
        if resource is None:
            return
    else:
        resource = client.get_json_object(args.uri)
    _print_json(resource)


def cmd_list(args: argparse.Namespace) -> None:
    """Print every item of a listing, one JSON object per line."""
    client = _make_client(args)
    count = 0
    for item in client.list_json_objects(args.uri):
        print(json.dumps(item))
        count += 1
        if args.limit and count >= args.limit:
            break


def cmd_put(args: argparse.Namespace) -> None:
    """Create or replace a resource."""
    client = _make_client(args)
    client.put_content(args.uri, _read_body(args.body), wait_for_completion=not args.no_wait)
    print(f"Put {args.uri}")


def cmd_patch(args: argparse.Namespace) -> None:
    """Update a resource."""
    client = _make_client(args)
    client.patch_content(args.uri, _read_body(args.body))
    print(f"Patched {args.uri}")


def cmd_delete(args: argparse.Namespace) -> None:
    """Delete a resource."""
    client = _make_client(args)
    client.delete_resource(args.uri, wait_for_completion=not args.no_wait)
    print(f"Deleted {args.uri}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Run Azure Resource Manager operations with LRO polling and pagination",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    # get
    p_get = subparsers.add_parser("get", help="Print a resource as JSON")
    add_common_args(p_get)
    p_get.add_argument("--allow-missing", action="store_true",
                       help="Exit 0 without output if the resource does not exist")

    # list
    p_list = subparsers.add_parser("list", help="Print all items of a paginated listing")
    add_common_args(p_list)
    p_list.add_argument("--limit", type=int, default=0,
                        help="Stop after this many items (default: all)")

    # put
    p_put = subparsers.add_parser("put", help="Create or replace a resource")
    add_common_args(p_put)
    p_put.add_argument("--body", required=True, help="Path to JSON request body")
    p_put.add_argument("--no-wait", action="store_true",
                       help="Return once the request is accepted, without polling")

    # patch
    p_patch = subparsers.add_parser("patch", help="Update a resource")
    add_common_args(p_patch)
    p_patch.add_argument("--body", required=True, help="Path to JSON request body")

    # delete
    p_delete = subparsers.add_parser("delete", help="Delete a resource")
    add_common_args(p_delete)
    p_delete.add_argument("--no-wait", action="store_true",
                          help="Return once the request is accepted, without polling")

    return parser


def main(argv: list[str] | None = None) -> None:
    args = build_parser().parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, stream=sys.stderr,
                            format="%(asctime)s %(name)s %(levelname)s %(message)s")

    commands = {
        "get": cmd_get,
        "list": cmd_list,
        "put": cmd_put,
        "patch": cmd_patch,
        "delete": cmd_delete,
    }
    try:
        commands[args.command](args)
    except (ArmError, AzureError, OSError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
