"""nostr-bunker admin CLI: provision the identity and edit its origin allow-list."""

from __future__ import annotations

import argparse
import json
import logging
import sys

from nostr_bunker.errors import BunkerError, MissingIdentityError
from nostr_bunker.identity_store import IdentityStore
from nostr_bunker.storage import FileBlobStore
from nostr_bunker.types import Identity


def _build_parser() -> argparse.ArgumentParser:
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--home", default=None)
    common.add_argument("--json", action="store_true")
    common.add_argument("--verbose", "-v", action="store_true")

    parser = argparse.ArgumentParser(prog="nostr-bunker", description="nostr-bunker signer admin")
    subparsers = parser.add_subparsers(dest="command", required=True)

    init_parser = subparsers.add_parser("init", parents=[common], help="Create the signer identity")
    init_parser.add_argument("--force", action="store_true", help="Replace an existing identity")

    subparsers.add_parser("show", parents=[common], help="Show the signer identity")

    allow_parser = subparsers.add_parser("allow", parents=[common], help="Allow an origin to use the signer")
    allow_parser.add_argument("origin")

    revoke_parser = subparsers.add_parser("revoke", parents=[common], help="Remove an allowed origin")
    revoke_parser.add_argument("origin")

    return parser


def _identity_payload(command: str, identity: Identity) -> dict[str, object]:
    return {
        "command": command,
        "npub": identity.npub,
        "public_key": identity.public_key,
        "allowed_origins": sorted(identity.allowed_origins),
    }


def _print_identity(identity: Identity) -> None:
    print(f"npub: {identity.npub}")
    print(f"publicKey: {identity.public_key}")
    if not identity.allowed_origins:
        print("allowedOrigins: (none)")
        return
    print("allowedOrigins:")
    for origin in sorted(identity.allowed_origins):
        print(f"  {origin}")


def _has_identity(store: IdentityStore) -> bool:
    try:
        store.load()
    except MissingIdentityError:
        return False
    return True


def _run(args: argparse.Namespace) -> int:
    blobs = FileBlobStore(args.home)
    store = IdentityStore(blobs)

    if args.command == "init":
        if not args.force and _has_identity(store):
            print(
                f"An identity already exists at {blobs.path_for(store.key)}. Pass --force to replace it.",
                file=sys.stderr,
            )
            return 1
        result = store.provision()
        if args.json:
            print(json.dumps({"command": "init", "created": True, "npub": result.npub}, sort_keys=True))
            return 0
        print("Created nostr-bunker identity")
        print(f"npub: {result.npub}")
        return 0

    if args.command == "show":
        identity = store.load()
    elif args.command == "allow":
        identity = store.grant_origin(args.origin)
    elif args.command == "revoke":
        identity = store.revoke_origin(args.origin)
    else:
        return 1

    if args.json:
        print(json.dumps(_identity_payload(args.command, identity), sort_keys=True))
        return 0
    _print_identity(identity)
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    try:
        return _run(args)
    except (BunkerError, ValueError) as error:
        print(f"error: {error}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
