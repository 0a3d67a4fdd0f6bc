#!/usr/bin/env python3
"""
CLI for API Key Management.

Provides commands to generate, list and revoke API keys in the configured
store. Only meaningful with STORAGE_BACKEND=dynamodb: the in-memory store
does not outlive this process.
"""

import argparse
import asyncio
import sys
from datetime import datetime, timezone
from typing import Optional

from adoption_api.config import settings
from adoption_api.exceptions import AdoptionAPIError
from adoption_api.models.api_key import AccessLevel
from adoption_api.repositories.api_key_repository import ApiKeyStore
from adoption_api.stores import build_stores


def get_store() -> ApiKeyStore:
    """Return the API key store for the configured backend."""
    if settings.storage_backend != "dynamodb":
        print(
            "⚠️  STORAGE_BACKEND is 'memory': keys created here are lost "
            "when the command exits."
        )
    return build_stores(settings).api_keys


def parse_expiry(value: Optional[str]) -> Optional[datetime]:
    """
    Parse an ISO 8601 expiry; naive values are taken as UTC.

    Raises:
        argparse.ArgumentTypeError: If the value is not ISO 8601
    """
    if value is None:
        return None
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"invalid ISO 8601 timestamp: {value}") from e
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


async def cmd_generate(
    owner_name: str,
    access_level: AccessLevel,
    expires_at: Optional[datetime],
) -> None:
    """
    Generate a new API key and store it.

    Args:
        owner_name: Who the key is issued to
        access_level: READ_ONLY or READ_WRITE
        expires_at: Optional expiry timestamp
    """
    store = get_store()
    try:
        api_key = await store.create(owner_name, access_level, expires_at)
    except AdoptionAPIError as e:
        print(f"✗ Error: {e.message}")
        sys.exit(1)

    print("✓ API Key created successfully")
    print(f"\nKey ID: {api_key.id}")
    print(f"API Key: {api_key.key_value}")
    print("\n⚠️  IMPORTANT: Save this API key now!")
    print("   It will not be shown again.")
    print(f"\nOwner: {api_key.owner_name}")
    print(f"Access Level: {api_key.access_level.value}")
    print(f"Expires: {api_key.expires_at.isoformat() if api_key.expires_at else 'never'}")


async def cmd_list() -> None:
    """List all API keys with their metadata (never the key values)."""
    store = get_store()
    keys = await store.list_all()

    if not keys:
        print("No API keys found.")
        return

    print(
        f"\n{'ID':<6} {'Access Level':<14} {'Created':<27}"
        f" {'Expires':<27} {'Owner':<30}"
    )
    print("-" * 108)

    for api_key in keys:
        owner = api_key.owner_name
        if len(owner) > 27:
            owner = owner[:27] + "..."
        expires = api_key.expires_at.isoformat() if api_key.expires_at else "never"
        print(
            f"{api_key.id:<6} {api_key.access_level.value:<14}"
            f" {api_key.created_at.isoformat():<27} {expires:<27} {owner:<30}"
        )

    print(f"\nTotal: {len(keys)} API keys")


async def cmd_revoke(key_id: int) -> None:
    """
    Revoke an API key by deleting it.

    Args:
        key_id: The key ID to revoke
    """
    store = get_store()
    if not await store.delete_by_id(key_id):
        print(f"✗ Error: API key {key_id} not found")
        sys.exit(1)

    print(f"✓ API key {key_id} has been revoked")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Manage API keys for the Adoption API",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    subparsers = parser.add_subparsers(dest="command", help="Command")

    generate_parser = subparsers.add_parser("generate", help="Generate a new API key")
    generate_parser.add_argument(
        "--owner", type=str, required=True, help="Who the key is issued to"
    )
    generate_parser.add_argument(
        "--access-level",
        type=AccessLevel,
        choices=list(AccessLevel),
        default=AccessLevel.READ_ONLY,
        help="Access level (default: READ_ONLY)",
    )
    generate_parser.add_argument(
        "--expires-at",
        type=parse_expiry,
        help="Expiry as ISO 8601, e.g. 2026-12-31T23:59:59Z (default: never)",
    )

    subparsers.add_parser("list", help="List all API keys")

    revoke_parser = subparsers.add_parser("revoke", help="Revoke an API key")
    revoke_parser.add_argument("key_id", type=int, help="Key ID to revoke")

    return parser


def main() -> None:
    """Main entry point for the CLI."""
    parser = build_parser()
    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        sys.exit(1)

    if args.command == "generate":
        asyncio.run(cmd_generate(args.owner, args.access_level, args.expires_at))
    elif args.command == "list":
        asyncio.run(cmd_list())
    elif args.command == "revoke":
        asyncio.run(cmd_revoke(args.key_id))


if __name__ == "__main__":
    main()
