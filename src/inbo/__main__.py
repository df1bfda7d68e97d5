"""Inbo command-line entry point.

Examples:
  inbo proxy                       Run the same-origin proxy on :3000
  inbo check-email me@example.com  Is this address registered?
  inbo login me@example.com        Sign in with a one-time code
  inbo whoami                      Show the signed-in profile
  inbo logout --all-devices        Sign out everywhere
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys

import httpx
from rich.console import Console
from rich.prompt import Prompt
from rich.table import Table

from inbo import __version__
from inbo.api.client import ApiClient
from inbo.config import get_settings
from inbo.errors import InboError
from inbo.logging_setup import setup_logging
from inbo.services.auth import AuthService
from inbo.services.user import UserService

logger = logging.getLogger(__name__)
console = Console()


async def cmd_check_email(args: argparse.Namespace) -> int:
    async with ApiClient() as client:
        result = await AuthService(client).check_email(args.email)
    state = "registered" if result.exists else "not registered"
    console.print(f"{args.email} is {state}")
    return 0


async def cmd_login(args: argparse.Namespace) -> int:
    async with ApiClient() as client:
        auth = AuthService(client)
        sent = await auth.send_otp(args.email)
        if not sent.success:
            console.print(f"[red]Could not send code:[/red] {sent.message}")
            return 1
        console.print(f"Code sent to {args.email}")

        otp = args.otp or Prompt.ask("Enter the code")
        result = await auth.verify_otp(args.email, otp)

    who = result.user.email if result.user else args.email
    console.print(f"[green]Signed in as {who}[/green]")
    return 0


async def cmd_whoami(args: argparse.Namespace) -> int:
    async with ApiClient() as client:
        profile = await UserService(client).get_profile()

    table = Table(title="Inbo profile", show_header=False)
    for field, value in profile.model_dump().items():
        table.add_row(field, "" if value is None else str(value))
    console.print(table)
    return 0


async def cmd_logout(args: argparse.Namespace) -> int:
    async with ApiClient() as client:
        await AuthService(client).logout(logout_from_all_devices=args.all_devices)
    console.print("Signed out")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="inbo",
        description="Inbo newsletter client",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__.split("\n\n", 1)[1],
    )
    parser.add_argument("--version", "-v", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--log-level", default=None, help="Override INBO_LOG_LEVEL")

    sub = parser.add_subparsers(dest="command", required=True)

    proxy = sub.add_parser("proxy", help="Run the same-origin proxy")
    proxy.add_argument("--host", default=None)
    proxy.add_argument("--port", type=int, default=None)

    check = sub.add_parser("check-email", help="Check whether an email is registered")
    check.add_argument("email")

    login = sub.add_parser("login", help="Sign in with a one-time code")
    login.add_argument("email")
    login.add_argument("--otp", default=None, help="Code to verify (prompted if omitted)")

    sub.add_parser("whoami", help="Show the signed-in profile")

    logout = sub.add_parser("logout", help="Sign out and forget stored tokens")
    logout.add_argument("--all-devices", action="store_true")

    return parser


COMMANDS = {
    "check-email": cmd_check_email,
    "login": cmd_login,
    "whoami": cmd_whoami,
    "logout": cmd_logout,
}


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    settings = get_settings()
    setup_logging(level=args.log_level or settings.log_level)

    if args.command == "proxy":
        from inbo.proxy.serve import run_proxy

        run_proxy(host=args.host, port=args.port, settings=settings)
        return 0

    try:
        return asyncio.run(COMMANDS[args.command](args))
    except (InboError, ValueError) as e:
        console.print(f"[red]Error:[/red] {e}")
        return 1
    except httpx.TransportError as e:
        console.print(f"[red]Network error:[/red] {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
