"""Command-line interface."""

import argparse
import sys
from typing import TYPE_CHECKING

from . import __version__

if TYPE_CHECKING:
    from .data_manager import DataManager, ManagerSummary


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        description="Benangmerah Data Manager",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  benangmerah-dm run --config config/local.yaml --debug
  benangmerah-dm run --config config/local.yaml --instance http://example.org/src
  benangmerah-dm instances --config config/local.yaml
        """,
    )

    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    run_parser = subparsers.add_parser(
        "run", help="Fetch instances and submit their triples"
    )
    run_parser.add_argument("--config", "-c", type=str, help="Configuration file path")
    run_parser.add_argument(
        "--instance",
        "-i",
        action="append",
        default=[],
        help="Only fetch this instance id (repeatable)",
    )
    run_parser.add_argument(
        "--clear",
        action="store_true",
        help="Clear each instance's graph before fetching",
    )
    run_parser.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="Give up waiting for submissions after this many seconds",
    )
    run_parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable DEBUG level logging",
    )

    instances_parser = subparsers.add_parser(
        "instances", help="List configured instances"
    )
    instances_parser.add_argument(
        "--config", "-c", type=str, help="Configuration file path"
    )

    drivers_parser = subparsers.add_parser("drivers", help="List available drivers")
    drivers_parser.add_argument(
        "--config", "-c", type=str, help="Configuration file path"
    )

    return parser


def _create_manager(args: argparse.Namespace) -> "DataManager | None":
    from .config import DataManagerConfig, load_config
    from .data_manager import DataManager
    from .utils.logging import configure_external_loggers, setup_logging

    try:
        config = load_config(args.config) if args.config else DataManagerConfig()
    except Exception as e:
        print(f"Failed to load configuration: {e}", file=sys.stderr)
        return None

    setup_logging(config.logging, debug=getattr(args, "debug", False))
    configure_external_loggers()

    try:
        return DataManager(config)
    except Exception as e:
        print(f"Failed to start data manager: {e}", file=sys.stderr)
        return None


def _print_summary(summary: "ManagerSummary") -> None:
    sessions = summary["sessions"]
    if not sessions:
        print("No instances configured")
    for session in sessions:
        print(
            f"{session['id']} [{session['state']}] driver={session['driver']} "
            f"queries={session['query_count']} pending={session['pending']}"
        )
        if session["last_log"]:
            print(f"  last: {session['last_log']}")
    print(
        f"Queue: {summary['queue_length']} waiting, {summary['running']} running, "
        f"{summary['completed']} completed, {summary['failed']} failed"
    )


def run_fetch(args: argparse.Namespace) -> int:
    """Fetch instances and wait until every submission has completed."""
    from .errors import DataManagerError

    manager = _create_manager(args)
    if manager is None:
        return 1

    try:
        manager.reload(force=True)
        instance_ids = args.instance or [
            s.id for s in manager.registry.sessions() if s.enabled
        ]
        if args.clear:
            # Clears must land before inserts when concurrency > 1
            for instance_id in instance_ids:
                manager.clear(instance_id)
            manager.queue.wait(args.timeout)
        if args.instance:
            for instance_id in instance_ids:
                manager.fetch(instance_id)
        else:
            manager.fetch_all()

        drained = manager.wait_idle(timeout=args.timeout)
    except DataManagerError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    finally:
        manager.shutdown(wait=False)

    summary = manager.summary()
    _print_summary(summary)

    if not drained:
        print("Timed out waiting for submissions", file=sys.stderr)
        return 1
    return 0 if summary["failed"] == 0 else 1


def list_instances(args: argparse.Namespace) -> int:
    """Print configured instances with their state."""
    from .errors import DataManagerError

    manager = _create_manager(args)
    if manager is None:
        return 1

    try:
        manager.reload(force=True)
    except DataManagerError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    finally:
        manager.shutdown(wait=False)

    _print_summary(manager.summary())
    return 0


def list_drivers(args: argparse.Namespace) -> int:
    """Print the driver catalogue."""
    manager = _create_manager(args)
    if manager is None:
        return 1

    manager.shutdown(wait=False)
    for name, details in sorted(manager.registry.driver_details.items()):
        version = f" {details.version}" if details.version else ""
        print(f"{name}{version} ({details.origin}): {details.summary}")
    return 0


def main() -> int:
    """Main CLI entry point."""
    parser = create_parser()
    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        return 1

    handlers = {
        "run": run_fetch,
        "instances": list_instances,
        "drivers": list_drivers,
    }

    handler = handlers.get(args.command)
    if handler:
        return handler(args)
    else:
        print(f"Unknown command: {args.command}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
