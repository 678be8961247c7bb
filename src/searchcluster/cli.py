"""
SearchCluster administration.

Usage:
    python -m searchcluster.cli status
    python -m searchcluster.cli check
    python -m searchcluster.cli init --force
    python -m searchcluster.cli serve [--port PORT]

Commands:
    status   Check every host and print its health
    check    Compare each writable host's index against the desired configuration
    init     Drop and recreate the index on every writable host (DESTRUCTIVE)
    serve    Run the HTTP status server
"""

import argparse
import asyncio
import sys
from typing import List, Optional

from searchcluster.cluster.host import ROLE_WRITE
from searchcluster.cluster.router import ClusterRouter
from searchcluster.cluster.status import start_status_server
from searchcluster.errors import SearchClusterError
from searchcluster.platform.logging import configure_logging, get_logger

logger = get_logger(__name__)


async def show_status(router: ClusterRouter) -> int:
    rows = await router.check_health()
    if not rows:
        print("No search hosts are configured.")
        return 1

    for row in rows:
        if row["disabled"]:
            state = "disabled"
        elif row["reachable"] is None:
            state = "unknown"
        else:
            state = "okay" if row["reachable"] else "fail"
        roles = ",".join(row["roles"]) or "-"
        print(f"{row['service']:<20} {row['host']:<32} {roles:<12} {state}")
    return 0


async def check_indexes(router: ClusterRouter) -> int:
    hosts = router.hosts_for_role(ROLE_WRITE)
    if not hosts:
        print("No writable search hosts are configured.")
        return 1

    exit_code = 0
    for host in hosts:
        try:
            differences = await host.engine.index_differences()
        except SearchClusterError as e:
            print(f"{host.display_name}: unable to check index: {e}")
            exit_code = 1
            continue

        if differences:
            exit_code = 1
            print(f"{host.display_name}: index is out of date")
            for difference in differences:
                print(f"    {difference}")
        else:
            print(f"{host.display_name}: index is up to date")
    return exit_code


async def init_indexes(router: ClusterRouter) -> int:
    hosts = router.hosts_for_role(ROLE_WRITE)
    if not hosts:
        print("No writable search hosts are configured.")
        return 1

    for host in hosts:
        print(f"Initializing index on {host.display_name}...")
        await host.engine.init_index()
    print("Done. Documents must be reindexed.")
    return 0


async def run(args: argparse.Namespace) -> int:
    router = ClusterRouter.from_settings()
    try:
        if args.command == "status":
            return await show_status(router)
        if args.command == "check":
            return await check_indexes(router)
        if args.command == "init":
            if not args.force:
                print("Refusing to destroy indexes without --force.")
                return 2
            return await init_indexes(router)
        if args.command == "serve":
            await start_status_server(router, port=args.port)
            return 0
        return 2
    finally:
        await router.close()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="searchcluster",
        description="Administer the full-text search cluster.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("status", help="Check hosts and print their health")
    subparsers.add_parser("check", help="Check index configuration on writable hosts")

    init = subparsers.add_parser("init", help="Rebuild indexes (DESTRUCTIVE)")
    init.add_argument("--force", action="store_true", help="Confirm index destruction")

    serve = subparsers.add_parser("serve", help="Run the status server")
    serve.add_argument("--port", type=int, default=None)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    configure_logging()
    args = build_parser().parse_args(argv)
    return asyncio.run(run(args))


if __name__ == "__main__":
    sys.exit(main())
