"""
Crisp CLI - Command-line interface for the plugin endpoints.

This layer provides the user-facing CLI commands, using the SDK layer
for all operations. It handles:
- Argument parsing
- TTY detection for human vs machine output
- JSON output for piping/automation
"""

import argparse
import json
import logging
import sys
from typing import Any

from crisp_cli.core.client import CrispError
from crisp_cli.sdk import CrispClient

# =============================================================================
# Output Helpers
# =============================================================================


def is_tty() -> bool:
    """Check if stdout is a TTY (human) or pipe (machine)."""
    return sys.stdout.isatty()


def json_output(data: Any, pretty: bool = False) -> None:
    """Print JSON output."""
    indent = 2 if pretty or is_tty() else None
    print(json.dumps(data, indent=indent, default=str))


def error_output(error: CrispError) -> None:
    """Print error and exit."""
    json_output(error.to_dict())
    sys.exit(1)


def success_output(data: Any) -> None:
    """Print success output."""
    json_output(data)


# =============================================================================
# CLI Commands
# =============================================================================


def cmd_session(client: CrispClient, _args: argparse.Namespace) -> None:
    """Check the connected plugin session."""
    try:
        response = client.plugin.check_connect_session_validity()
        success_output({"valid": True, "status": response.status})
    except CrispError as e:
        error_output(e)


def cmd_websites(client: CrispClient, _args: argparse.Namespace) -> None:
    """List websites linked to the connected plugin."""
    try:
        websites, _ = client.plugin.list_connect_websites()
        websites = websites or []

        if is_tty():
            print(f"Websites ({len(websites)}):")
            for website_id in websites:
                print(f"  {website_id}")
        else:
            success_output({"data": websites})
    except CrispError as e:
        error_output(e)


def cmd_get(client: CrispClient, args: argparse.Namespace) -> None:
    """Get plugin information."""
    try:
        plugin, _ = client.plugin.get_information(args.plugin_id)
        data = plugin.to_dict() if plugin else {}

        if is_tty():
            for key, value in data.items():
                if isinstance(value, list):
                    value = ", ".join(value)
                print(f"{key.capitalize()}: {value}")
        else:
            success_output(data)
    except CrispError as e:
        error_output(e)


def cmd_stars(client: CrispClient, args: argparse.Namespace) -> None:
    """Get plugin rating statistics."""
    try:
        stars, _ = client.plugin.get_stars(args.plugin_id)
        success_output(stars.to_dict() if stars else {})
    except CrispError as e:
        error_output(e)


def cmd_rank(client: CrispClient, args: argparse.Namespace) -> None:
    """Get our own plugin rank."""
    try:
        rank, _ = client.plugin.get_personal_rank(args.plugin_id)
        success_output(rank.to_dict() if rank else {})
    except CrispError as e:
        error_output(e)


def cmd_rank_set(client: CrispClient, args: argparse.Namespace) -> None:
    """Rank a plugin."""
    try:
        client.plugin.rank(args.plugin_id, args.rank)
        success_output({"plugin_id": args.plugin_id, "rank": args.rank})
    except CrispError as e:
        error_output(e)


def cmd_rank_delete(client: CrispClient, args: argparse.Namespace) -> None:
    """Delete our own plugin rank."""
    try:
        client.plugin.delete_rank(args.plugin_id)
        success_output({"plugin_id": args.plugin_id, "deleted": True})
    except CrispError as e:
        error_output(e)


# =============================================================================
# Main CLI
# =============================================================================


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="crisp",
        description="Crisp CLI - Command-line interface for the Crisp plugin API",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Credentials:
  CRISP_API_IDENTIFIER, CRISP_API_KEY (and optionally CRISP_API_TIER, CRISP_API_BASE_URL)

Examples:
  crisp plugin session
  crisp plugin websites | jq '.data[]'
  crisp plugin stars <plugin_id>
  crisp plugin rank-set <plugin_id> 5
""",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Log HTTP requests to stderr")
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # ========== Plugin ==========
    plugin = subparsers.add_parser("plugin", help="Plugin information, ratings and connect session")
    plugin.set_defaults(func=lambda _c, _a: plugin.print_help())
    plugin_sub = plugin.add_subparsers(dest="subcommand")

    p_session = plugin_sub.add_parser("session", help="Check connected plugin session validity")
    p_session.set_defaults(func=cmd_session)

    p_websites = plugin_sub.add_parser("websites", help="List websites linked to the connected plugin")
    p_websites.set_defaults(func=cmd_websites)

    p_get = plugin_sub.add_parser("get", help="Get plugin information")
    p_get.add_argument("plugin_id", help="Plugin ID")
    p_get.set_defaults(func=cmd_get)

    p_stars = plugin_sub.add_parser("stars", help="Get plugin rating statistics")
    p_stars.add_argument("plugin_id", help="Plugin ID")
    p_stars.set_defaults(func=cmd_stars)

    p_rank = plugin_sub.add_parser("rank", help="Get our own rank of a plugin")
    p_rank.add_argument("plugin_id", help="Plugin ID")
    p_rank.set_defaults(func=cmd_rank)

    p_rank_set = plugin_sub.add_parser("rank-set", help="Rank a plugin")
    p_rank_set.add_argument("plugin_id", help="Plugin ID")
    p_rank_set.add_argument("rank", type=int, help="Rank to give")
    p_rank_set.set_defaults(func=cmd_rank_set)

    p_rank_delete = plugin_sub.add_parser("rank-delete", help="Delete our own rank of a plugin")
    p_rank_delete.add_argument("plugin_id", help="Plugin ID")
    p_rank_delete.set_defaults(func=cmd_rank_delete)

    return parser


def main(argv: list[str] | None = None) -> None:
    """Main CLI entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    if not args.command:
        parser.print_help()
        sys.exit(0)

    client = CrispClient()

    # Run command (all subparsers have default funcs that print help)
    args.func(client, args)


if __name__ == "__main__":
    main()
