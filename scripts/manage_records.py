#!/usr/bin/env python3
"""
CLI for managed record administration.

Provides commands to list zones and to create, list, update, delete and
inspect managed records, and to regenerate their update credentials.
"""

import argparse
import asyncio
import sys
from typing import Optional

import aioboto3

from route53_ddns.config import settings
from route53_ddns.dns.route53 import Route53Backend
from route53_ddns.exceptions import DDNSAPIError
from route53_ddns.repositories import EventRepository, RecordRepository
from route53_ddns.services.record_service import RecordService


def build_service() -> RecordService:
    """Build a RecordService against the configured AWS endpoints."""
    session = aioboto3.Session()
    return RecordService(
        RecordRepository(session=session),
        EventRepository(session=session),
        Route53Backend(session=session),
    )


def print_credential(hostname: str, credential: str) -> None:
    """Print a freshly minted credential with the one-time warning."""
    print(f"\nHostname: {hostname}")
    print(f"Update credential: {credential}")
    print("\n⚠️  IMPORTANT: Save this credential now!")
    print("   It will not be shown again.")


async def cmd_zones(service: RecordService) -> None:
    """List hosted zones."""
    zones = await service.list_zones()
    if not zones:
        print("No hosted zones found.")
        return

    print(f"\n{'Zone ID':<26} {'Name':<40} {'Records':<8} {'Private':<8}")
    print("-" * 84)
    for zone in zones:
        print(
            f"{zone.zone_id:<26} {zone.name:<40}"
            f" {zone.record_count:<8} {str(zone.is_private):<8}"
        )


async def cmd_create(
    service: RecordService, hostname: str, zone_id: str, ttl: Optional[int]
) -> None:
    """
    Create a managed record and print its credential.

    Args:
        service: RecordService instance
        hostname: Hostname to manage
        zone_id: Hosted zone ID
        ttl: DNS TTL (server default if None)
    """
    record, credential = await service.create(hostname, zone_id, ttl)
    print("✓ Record created successfully")
    print(f"Zone: {record.zone_name} ({record.zone_id})")
    print(f"TTL: {record.ttl}")
    print_credential(record.hostname, credential)


async def cmd_list(service: RecordService) -> None:
    """List managed records."""
    records = await service.list()
    if not records:
        print("No managed records found.")
        return

    print(
        f"\n{'Hostname':<40} {'Address':<40} {'TTL':<7}"
        f" {'Enabled':<8} {'Last updated':<28}"
    )
    print("-" * 126)
    for record in records:
        print(
            f"{record.hostname:<40} {record.current_address or '-':<40}"
            f" {record.ttl:<7} {str(record.enabled):<8} {record.last_updated:<28}"
        )

    print(f"\nTotal: {len(records)} records")


async def cmd_regenerate(service: RecordService, hostname: str) -> None:
    """Regenerate a record's credential."""
    record, credential = await service.regenerate_credential(hostname)
    print("✓ Credential regenerated; the previous credential no longer works")
    print_credential(record.hostname, credential)


async def cmd_update(
    service: RecordService,
    hostname: str,
    ttl: Optional[int],
    enabled: Optional[bool],
) -> None:
    """Change a record's TTL and/or enabled flag."""
    record = await service.update(hostname, ttl=ttl, enabled=enabled)
    print(
        f"✓ Record {record.hostname} updated"
        f" (ttl={record.ttl}, enabled={record.enabled})"
    )


async def cmd_delete(service: RecordService, hostname: str) -> None:
    """Delete a record and its DNS record."""
    await service.delete(hostname)
    print(f"✓ Record {hostname} deleted")


async def cmd_history(service: RecordService, hostname: str, limit: int) -> None:
    """Print update history, most recent first."""
    events = await service.history(hostname, limit=limit)
    if not events:
        print(f"No update history for {hostname}.")
        return

    print(
        f"\n{'Timestamp':<28} {'Status':<14} {'Previous':<40}"
        f" {'New':<40} {'Source':<40}"
    )
    print("-" * 166)
    for event in events:
        print(
            f"{event.timestamp:<28} {event.status:<14}"
            f" {event.previous_address or '-':<40} {event.new_address or '-':<40}"
            f" {event.source_address:<40}"
        )


async def run(args: argparse.Namespace) -> None:
    """Dispatch a parsed command."""
    service = build_service()
    if args.command == "zones":
        await cmd_zones(service)
    elif args.command == "create":
        await cmd_create(service, args.hostname, args.zone_id, args.ttl)
    elif args.command == "list":
        await cmd_list(service)
    elif args.command == "regenerate":
        await cmd_regenerate(service, args.hostname)
    elif args.command == "update":
        await cmd_update(service, args.hostname, args.ttl, args.enabled)
    elif args.command == "delete":
        await cmd_delete(service, args.hostname)
    elif args.command == "history":
        await cmd_history(service, args.hostname, args.limit)


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        description="Manage dynamic DNS records",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    subparsers = parser.add_subparsers(dest="command", help="Command")

    subparsers.add_parser("zones", help="List Route 53 hosted zones")

    create_parser = subparsers.add_parser("create", help="Create a managed record")
    create_parser.add_argument("hostname", type=str, help="Hostname to manage")
    create_parser.add_argument("zone_id", type=str, help="Hosted zone ID")
    create_parser.add_argument(
        "--ttl",
        type=int,
        default=None,
        help=f"DNS TTL in seconds (default: {settings.default_record_ttl})",
    )

    subparsers.add_parser("list", help="List managed records")

    regenerate_parser = subparsers.add_parser(
        "regenerate", help="Regenerate a record's update credential"
    )
    regenerate_parser.add_argument("hostname", type=str, help="Record hostname")

    update_parser = subparsers.add_parser("update", help="Change TTL or enabled flag")
    update_parser.add_argument("hostname", type=str, help="Record hostname")
    update_parser.add_argument("--ttl", type=int, default=None, help="New DNS TTL")
    enabled_group = update_parser.add_mutually_exclusive_group()
    enabled_group.add_argument(
        "--enable", dest="enabled", action="store_const", const=True, default=None
    )
    enabled_group.add_argument(
        "--disable", dest="enabled", action="store_const", const=False
    )

    delete_parser = subparsers.add_parser("delete", help="Delete a managed record")
    delete_parser.add_argument("hostname", type=str, help="Record hostname")

    history_parser = subparsers.add_parser("history", help="Show update history")
    history_parser.add_argument("hostname", type=str, help="Record hostname")
    history_parser.add_argument(
        "--limit",
        type=int,
        default=settings.default_history_limit,
        help=f"Maximum events (default: {settings.default_history_limit})",
    )

    return parser


def main() -> None:
    """Main entry point for the CLI."""
    parser = build_parser()
    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        sys.exit(1)

    try:
        asyncio.run(run(args))
    except DDNSAPIError as exc:
        print(f"✗ Error: {exc.message}")
        sys.exit(1)


if __name__ == "__main__":
    main()
