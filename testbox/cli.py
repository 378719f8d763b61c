"""
testbox command line.

Usage:
  testbox doctor                 # resolve the Docker endpoint and run preconditions
  testbox doctor --json          # same, machine-readable
  testbox status <container>     # classify a container's run state
"""

import argparse
import json
import sys
from typing import List, Optional

from docker.errors import DockerException
from rich import box
from rich.console import Console
from rich.table import Table

from .config import settings
from .models.errors import RuntimeClientError, TestboxException
from .models.state import ContainerStateSnapshot
from .services.container import (
    DockerClientFactory,
    is_container_running,
    is_container_stopped,
)
from .utils.logging import setup_logging


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="testbox",
        description="Docker environment discovery and container status for tests",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    doctor = sub.add_parser("doctor", help="Check the Docker environment")
    doctor.add_argument(
        "--no-fail-fast",
        action="store_true",
        help="Skip the liveness ping after client construction",
    )
    doctor.add_argument("--json", action="store_true", help="Print JSON")

    status = sub.add_parser("status", help="Classify a container's run state")
    status.add_argument("container", help="Container id or name")
    status.add_argument(
        "--min-running",
        type=float,
        default=None,
        metavar="SECONDS",
        help="Only count the container as running after this many seconds",
    )
    status.add_argument("--json", action="store_true", help="Print JSON")

    return parser


def _print_error(console: Console, error: TestboxException, as_json: bool) -> None:
    if as_json:
        print(error.to_response().model_dump_json())
        return
    console.print(f"[red]Error:[/red] {error.message}")
    for detail in error.details:
        console.print(f"  - {detail.field}: {detail.message}")


def cmd_doctor(args, console: Console) -> int:
    factory = DockerClientFactory.instance()
    factory.client(fail_fast=not args.no_fail_fast)

    endpoint = factory.endpoint
    preconditions = factory.preconditions
    report = {
        "endpoint": endpoint.to_dict() if endpoint else None,
        "host_ip": factory.docker_host_ip_address(),
        "preconditions": preconditions.to_dict() if preconditions else None,
    }

    if args.json:
        print(json.dumps(report, indent=2))
        return 0

    table = Table(title="Docker environment", box=box.SIMPLE)
    table.add_column("Check", style="cyan")
    table.add_column("Result")
    if endpoint:
        table.add_row("Endpoint", endpoint.raw_uri)
        table.add_row("Found by", endpoint.source)
    table.add_row("Host IP", str(report["host_ip"]))
    if preconditions:
        table.add_row("Docker version", str(preconditions.docker_version))
        if preconditions.disk:
            disk = preconditions.disk
            result = disk.status.value
            if disk.available_mb is not None:
                result += f" ({disk.available_mb} MB free, {disk.used_percent}% used)"
            table.add_row("Disk space", result)
    console.print(table)
    return 0


def cmd_status(args, console: Console) -> int:
    client = DockerClientFactory.instance().client()
    try:
        container = client.containers.get(args.container)
    except DockerException as e:
        raise RuntimeClientError(f"Cannot inspect container {args.container}: {e}") from e

    state = ContainerStateSnapshot.from_inspect(container.attrs)
    if is_container_running(state, args.min_running):
        classification = "running"
    elif is_container_stopped(state):
        classification = "stopped"
    else:
        classification = "not-started" if not state.running else "starting"

    if args.json:
        print(
            json.dumps(
                {
                    "container": args.container,
                    "status": classification,
                    "running": state.running,
                    "paused": state.paused,
                    "started_at": state.started_at,
                    "finished_at": state.finished_at,
                },
                default=str,
            )
        )
    else:
        console.print(f"{args.container}: [bold]{classification}[/bold]")
    return 0


COMMANDS = {
    "doctor": cmd_doctor,
    "status": cmd_status,
}


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(settings.logging)
    console = Console()

    try:
        return COMMANDS[args.command](args, console)
    except TestboxException as e:
        _print_error(console, e, args.json)
        return 1


if __name__ == "__main__":
    sys.exit(main())
