#!/usr/bin/env python3
"""
Command line front end for the VirtualBox provider.

    cpi-virtualbox actions
    cpi-virtualbox describe create_worker
    cpi-virtualbox run create_volume -p disk_path=/tmp/disk.vdi -p size_mb=10240
"""

import argparse
import json
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import yaml
from rich.console import Console
from rich.table import Table

from cpi_virtualbox import __version__
from cpi_virtualbox.logging import configure_logging
from cpi_virtualbox.provider import VirtualBoxExtension
from cpi_virtualbox.settings import ProviderSettings

console = Console()


def parse_param(raw: str) -> Tuple[str, Any]:
    """Split ``key=value``; the value is decoded as JSON when it parses as JSON.

    ``size_mb=10240`` gives an integer, ``worker_name=vm1`` a string. Quote a
    numeric-looking name to keep it a string: ``worker_name='"123"'``.
    """
    key, sep, value = raw.partition("=")
    if not sep or not key:
        raise argparse.ArgumentTypeError(f"Expected key=value, got: {raw}")
    try:
        return key, json.loads(value)
    except json.JSONDecodeError:
        return key, value


def build_provider(args) -> VirtualBoxExtension:
    """Create the provider from ``--config`` or the environment."""
    config = getattr(args, "config", None)
    settings = ProviderSettings.load(Path(config)) if config else ProviderSettings.from_env()
    return VirtualBoxExtension(settings=settings)


def cmd_actions(args) -> int:
    """List available actions."""
    provider = build_provider(args)

    table = Table(title="VirtualBox actions")
    table.add_column("Action", style="cyan")
    table.add_column("Description")
    for name in provider.list_actions():
        table.add_row(name, provider.get_action_definition(name).description)

    console.print(table)
    return 0


def cmd_describe(args) -> int:
    """Show the parameter schema of one action."""
    provider = build_provider(args)
    definition = provider.get_action_definition(args.action)
    if definition is None:
        console.print(f"[red]Action '{args.action}' not found[/]")
        return 1

    if args.json:
        print(json.dumps(definition.to_dict(), indent=2))
        return 0

    console.print(f"[bold]{definition.name}[/] - {definition.description}")
    if not definition.parameters:
        console.print("[dim]No parameters[/]")
        return 0

    table = Table()
    table.add_column("Parameter", style="cyan")
    table.add_column("Type", style="yellow")
    table.add_column("Required")
    table.add_column("Default", style="green")
    table.add_column("Description")
    for spec in definition.parameters:
        table.add_row(
            spec.name,
            spec.type.value,
            "yes" if spec.required else "no",
            "" if spec.default is None else str(spec.default),
            spec.description,
        )
    console.print(table)
    return 0


def cmd_run(args) -> int:
    """Execute one action and print its JSON result."""
    provider = build_provider(args)
    params: Dict[str, Any] = dict(args.param or [])

    result = provider.execute_action(args.action, params)
    print(json.dumps(result.to_dict(), indent=2))
    return 0 if result.success else 1


def create_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cpi-virtualbox", description="Run VirtualBox provider actions"
    )
    parser.add_argument("--version", action="version", version=f"cpi-virtualbox {__version__}")
    parser.add_argument("--config", "-c", help="YAML file with provider settings")
    parser.add_argument("--log-level", default="WARNING", help="Log level (default: WARNING)")
    parser.add_argument("--json-logs", action="store_true", help="Emit logs as JSON")

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    actions_parser = subparsers.add_parser("actions", help="List available actions")
    actions_parser.set_defaults(func=cmd_actions)

    describe_parser = subparsers.add_parser("describe", help="Show an action's parameters")
    describe_parser.add_argument("action", help="Action name")
    describe_parser.add_argument("--json", action="store_true", help="Output as JSON")
    describe_parser.set_defaults(func=cmd_describe)

    run_parser = subparsers.add_parser("run", help="Execute an action")
    run_parser.add_argument("action", help="Action name")
    run_parser.add_argument(
        "--param",
        "-p",
        action="append",
        type=parse_param,
        metavar="KEY=VALUE",
        help="Action parameter (repeatable); VALUE is parsed as JSON when possible",
    )
    run_parser.set_defaults(func=cmd_run)

    return parser


def main(argv: Optional[List[str]] = None) -> None:
    """Main entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)

    configure_logging(level=args.log_level, json_output=args.json_logs)

    if not hasattr(args, "func"):
        parser.print_help()
        sys.exit(1)

    try:
        sys.exit(args.func(args))
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted.[/]")
        sys.exit(1)
    except (OSError, ValueError, yaml.YAMLError) as e:
        console.print(f"[red]Error: {e}[/]")
        sys.exit(1)


if __name__ == "__main__":
    main()
