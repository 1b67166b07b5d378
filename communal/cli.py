"""Command-line interface for the communal roster."""

import sys
import json
import argparse
import logging
from pathlib import Path
from typing import List, Optional

from rich.console import Console
from rich.table import Table
from rich import box
from rich.markup import escape

from .categories import connection_categories
from .config import ConfigManager
from .errors import BaseCommunalError, ValidationError
from .logging_config import setup_logging
from .models import Config, Confidence, DuplicateSuggestion
from .network import graph_summary
from .repositories import JsonRecordStore
from .services import RosterService

logger = logging.getLogger(__name__)

console = Console()

CONFIDENCE_STYLES = {
    Confidence.HIGH.value: "bold red",
    Confidence.MEDIUM.value: "yellow",
    Confidence.LOW.value: "dim",
}


def create_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog="communal",
        description="Communal Networks - catalog people, tag them with groups, find duplicates",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Create a user and make them current
  communal users add "Jordan"

  # Add a connection in two groups
  communal add "Anna Lee" -c "Large Group" -c Prayer

  # Paste a list of names
  communal bulk-add --file names.txt -c "Freshman Group"

  # Review and merge duplicates
  communal duplicates
  communal merge "Anna Lee" --keep <connection-id>

  # Export the graph for the renderer
  communal graph -o network.json
""",
    )
    parser.add_argument("--config", help="Path to configuration file")
    parser.add_argument("--data", help="Path to the JSON record store")
    parser.add_argument("--log-level", help="Logging level (DEBUG, INFO, WARNING, ERROR)")

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # Users
    users_parser = subparsers.add_parser("users", help="Manage users")
    users_sub = users_parser.add_subparsers(dest="users_command")
    users_add = users_sub.add_parser("add", help="Create a user and select them")
    users_add.add_argument("name", help="User name")
    users_sub.add_parser("list", help="List users")
    users_select = users_sub.add_parser("select", help="Select the current user")
    users_select.add_argument("user", help="User id or exact name")

    # Connections
    add_parser = subparsers.add_parser("add", help="Add a connection")
    add_parser.add_argument("name", help="Connection name")
    add_parser.add_argument(
        "-c", "--category", action="append", default=[], dest="categories",
        help="Category (repeat for several; the first is primary)",
    )

    bulk_parser = subparsers.add_parser("bulk-add", help="Add many connections at once")
    source = bulk_parser.add_mutually_exclusive_group(required=True)
    source.add_argument("--names", help="Names separated by commas or newlines")
    source.add_argument("--file", help="File with one name per line")
    bulk_parser.add_argument(
        "-c", "--category", action="append", default=[], dest="categories",
        help="Category for every name (repeatable)",
    )

    subparsers.add_parser("list", help="List connections")

    delete_parser = subparsers.add_parser("delete", help="Delete a connection")
    delete_parser.add_argument("id", help="Connection id")

    # Duplicates
    dup_parser = subparsers.add_parser("duplicates", help="Show duplicate suggestions")
    dup_parser.add_argument(
        "--dismiss", action="append", default=[], help="Hide a suggestion by name"
    )

    merge_parser = subparsers.add_parser("merge", help="Merge a duplicate suggestion")
    merge_parser.add_argument("name", help="Suggestion name as shown by 'duplicates'")
    merge_parser.add_argument("--keep", help="Id of the connection to keep (default: first)")

    # Graph
    graph_parser = subparsers.add_parser("graph", help="Export the network graph as JSON")
    graph_parser.add_argument("-o", "--output", help="Write to file (default: stdout)")
    subparsers.add_parser("summary", help="Show network statistics")

    config_parser = subparsers.add_parser("generate-config", help="Generate configuration template")
    config_parser.add_argument("-o", "--output", help="Save to file (default: print to stdout)")

    return parser


def load_config_with_overrides(args: argparse.Namespace) -> Config:
    """Load configuration and apply command-line overrides."""
    config = ConfigManager(args.config).load()
    if args.data:
        config.storage.path = args.data
    if args.log_level:
        config.logging.level = args.log_level.upper()
    return config


def build_service(config: Config) -> RosterService:
    return RosterService(JsonRecordStore(config.storage.path), config)


def _find_user(service: RosterService, key: str):
    users = service.list_users()
    match = next((u for u in users if u.id == key), None)
    if match is None:
        match = next((u for u in users if u.name == key), None)
    if match is None:
        raise ValidationError(f"No user with id or name {key!r}", field="user", value=key)
    return match


def cmd_users(service: RosterService, args) -> int:
    if args.users_command == "add":
        user = service.create_user(args.name)
        console.print(f"[green]Created user[/green] {user.name} ({user.id})")
        return 0

    if args.users_command == "select":
        user = _find_user(service, args.user)
        service.select_user(user)
        console.print(f"Current user: {user.name}")
        return 0

    current = service.current_user()
    table = Table(title="Users", box=box.ROUNDED, header_style="bold cyan")
    table.add_column("Id", style="dim")
    table.add_column("Name", style="cyan")
    table.add_column("Current", justify="center")
    for user in service.list_users():
        table.add_row(user.id, escape(user.name), "*" if current and current.id == user.id else "")
    console.print(table)
    return 0


def cmd_add(service: RosterService, args) -> int:
    connection = service.add_connection(args.name, args.categories)
    console.print(f"[green]Added[/green] {connection.name} ({connection.id})")
    return 0


def cmd_bulk_add(service: RosterService, args) -> int:
    text = args.names
    if args.file:
        text = Path(args.file).read_text(encoding="utf-8")
    created = service.bulk_add(text, args.categories)
    console.print(f"[green]Added {len(created)} connection(s)[/green]")
    return 0


def cmd_list(service: RosterService, args) -> int:
    connections = service.list_connections()
    if not connections:
        console.print("No connections added yet.")
        return 0

    colors = service.category_colors()
    table = Table(
        title=f"All Connections ({len(connections)})",
        box=box.ROUNDED,
        header_style="bold cyan",
    )
    table.add_column("Id", style="dim")
    table.add_column("Name", style="cyan")
    table.add_column("Category")
    table.add_column("Mutual Connections")
    table.add_column("Added By")

    for connection in connections:
        categories = ", ".join(
            f"[{colors.get(c, 'white')}]{escape(c)}[/]" for c in connection_categories(connection)
        )
        mutuals = ", ".join(connection.mutual_connections) or "None"
        table.add_row(
            connection.id,
            escape(connection.name),
            categories,
            escape(mutuals),
            escape(connection.user_name),
        )

    console.print(table)
    return 0


def cmd_delete(service: RosterService, args) -> int:
    service.delete_connection(args.id)
    console.print(f"Deleted {args.id}")
    return 0


def render_suggestion(suggestion: DuplicateSuggestion) -> Table:
    style = CONFIDENCE_STYLES.get(suggestion.confidence, "")
    table = Table(
        title=f"{escape(suggestion.name)} [{style}]({suggestion.confidence})[/]",
        caption=escape(suggestion.reason),
        box=box.SIMPLE,
    )
    table.add_column("Id", style="dim")
    table.add_column("Name")
    table.add_column("Added By")
    for match in suggestion.matches:
        table.add_row(match.id, escape(match.name), escape(match.user_name))
    return table


def cmd_duplicates(service: RosterService, args) -> int:
    for name in args.dismiss:
        service.dismiss(name)

    suggestions = service.suggestions()
    if not suggestions:
        console.print("[green]No duplicate suggestions.[/green]")
        return 0

    console.print(
        f"[bold]{len(suggestions)} possible duplicate group(s).[/bold] "
        "Select the entry to keep and merge the rest."
    )
    for suggestion in suggestions:
        console.print(render_suggestion(suggestion))
    return 0


def cmd_merge(service: RosterService, args) -> int:
    suggestion = next((s for s in service.suggestions() if s.name == args.name), None)
    if suggestion is None:
        raise ValidationError(
            f"No duplicate suggestion named {args.name!r}", field="name", value=args.name
        )

    primary_id = args.keep or suggestion.matches[0].id
    if primary_id not in suggestion.match_ids:
        raise ValidationError(
            f"{primary_id} is not part of the suggestion", field="keep", value=primary_id
        )

    result = service.merge(suggestion, primary_id)
    if not result.success:
        console.print("[red]Unable to merge duplicates. Please try again.[/red]")
        for error in result.errors:
            console.print(f"  {error}")
        return 1

    console.print(f"[green]Merged duplicates for {result.merged.name}[/green]")
    return 0


def cmd_graph(service: RosterService, args) -> int:
    payload = service.network().to_payload()
    payload["colors"] = service.category_colors()
    text = json.dumps(payload, indent=2)

    if args.output:
        Path(args.output).write_text(text, encoding="utf-8")
        console.print(f"Graph written to {args.output}")
    else:
        print(text)
    return 0


def cmd_summary(service: RosterService, args) -> int:
    summary = graph_summary(service.network())
    table = Table(title="Network", box=box.ROUNDED, header_style="bold cyan")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right", style="green")
    for kind, count in summary["nodes"].items():
        table.add_row(f"{kind} nodes", str(count))
    table.add_row("links", str(summary["links"]))
    table.add_row("components", str(summary["components"]))
    console.print(table)
    return 0


def generate_config(args) -> int:
    if args.output:
        ConfigManager().save_template(args.output)
        console.print(f"Configuration template saved to {args.output}")
    else:
        print(json.dumps(ConfigManager.DEFAULT_CONFIG, indent=2))
    return 0


COMMANDS = {
    "users": cmd_users,
    "add": cmd_add,
    "bulk-add": cmd_bulk_add,
    "list": cmd_list,
    "delete": cmd_delete,
    "duplicates": cmd_duplicates,
    "merge": cmd_merge,
    "graph": cmd_graph,
    "summary": cmd_summary,
}


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    if args.command == "generate-config":
        return generate_config(args)

    try:
        config = load_config_with_overrides(args)
        setup_logging(config.logging)
        service = build_service(config)
        return COMMANDS[args.command](service, args)
    except KeyboardInterrupt:
        console.print("\nInterrupted by user")
        return 1
    except BaseCommunalError as e:
        logger.debug("Command failed", exc_info=True)
        console.print(f"[red]Error:[/red] {escape(e.message)}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
