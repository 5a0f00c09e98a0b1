"""
MongoDB Authentication Methods Demo - command line entry point.

Usage:
    mongo-auth-demo                 # list available methods
    mongo-auth-demo <method>        # run one demo
    mongo-auth-demo all             # run every demo

Environment Variables:
    LOG_LEVEL: Logging level (default: INFO)
    DEBUG: Log tracebacks for failed demos (default: false)
    See config.py for the per-mechanism credential variables.
"""
import argparse
import asyncio
import logging
import sys
from typing import Optional, Sequence

from mongo_auth_demo.config import get_settings, load_bundle
from mongo_auth_demo.core.mechanisms import MECHANISMS
from mongo_auth_demo.models.mechanism import MechanismKind
from mongo_auth_demo.services.demo_runner import AuthDemoRunner

logger = logging.getLogger("mongo_auth_demo")

ALL_METHODS = "all"


def format_usage() -> str:
    """List available methods with usage examples."""
    lines = [
        "MongoDB Authentication Methods Demo",
        "====================================",
        "",
        "Available authentication methods:",
        "",
    ]
    for kind, descriptor in MECHANISMS.items():
        lines.append(f"  {kind.value.ljust(15)} - {descriptor.name}")
        lines.append(f"  {' ' * 15}   {descriptor.description}")
        lines.append("")
    lines.extend([
        "Usage:",
        "  mongo-auth-demo [method]",
        "  mongo-auth-demo all       - Run all demos",
        "",
        "Examples:",
        "  mongo-auth-demo password",
        "  mongo-auth-demo certificate",
        "  mongo-auth-demo all",
    ])
    return "\n".join(lines)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mongo-auth-demo",
        description="Demonstrate MongoDB authentication mechanisms.",
    )
    parser.add_argument(
        "method",
        nargs="?",
        help=f"One of: {', '.join(k.value for k in MechanismKind)}, {ALL_METHODS}",
    )
    return parser


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s | %(levelname)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


async def run(method: str, runner: Optional[AuthDemoRunner] = None) -> None:
    """Run one demo, or all of them."""
    runner = runner or AuthDemoRunner(debug=get_settings().debug)
    if method == ALL_METHODS:
        await runner.run_all(load_bundle)
        return
    kind = MechanismKind.from_cli(method)
    await runner.run(kind, load_bundle(kind))


def main(argv: Optional[Sequence[str]] = None) -> int:
    """
    Main entry point.

    Returns:
        Process exit code: 1 for an unknown method or an unhandled failure
    """
    args = build_parser().parse_args(argv)
    settings = get_settings()
    configure_logging(settings.log_level)

    if args.method is None:
        print(format_usage())
        return 0

    method = args.method.strip().lower()
    if method != ALL_METHODS and method not in {k.value for k in MechanismKind}:
        print(f"Unknown authentication method: {args.method}", file=sys.stderr)
        print("Run without arguments to see available methods.", file=sys.stderr)
        return 1

    try:
        asyncio.run(run(method))
    except Exception as e:
        logger.error(f"Application error: {e}", exc_info=settings.debug)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
