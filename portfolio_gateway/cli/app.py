"""
Terminal front-end for the portfolio gateway.

    portfolio-gateway login you@example.com
    portfolio-gateway projects
    portfolio-gateway share
"""
from __future__ import annotations

import argparse
import getpass
import logging
import sys
from typing import Any, Callable, Dict, List, Optional, Sequence

from rich import box
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from ..config.config_manager import ConfigError
from ..gateway import ProfileDataGateway
from ..services.outcome import OperationResult

console = Console()

GatewayFactory = Callable[[], ProfileDataGateway]


def _report(result: OperationResult, success_message: str) -> int:
    if result.success:
        console.print(f"[green]✓[/green] {escape(success_message)}")
        return 0
    console.print(f"[red]✗[/red] {escape(result.error or '')}")
    return 1


def _read_password(args: argparse.Namespace) -> str:
    return args.password or getpass.getpass("Password: ")


def _render_projects(projects: List[Dict[str, Any]]) -> None:
    if not projects:
        console.print("[dim]No projects yet.[/dim]")
        return
    table = Table(title="Projects", box=box.SIMPLE_HEAVY)
    table.add_column("ID", style="dim")
    table.add_column("Title", style="bold", no_wrap=True)
    table.add_column("Type")
    table.add_column("Demo")
    table.add_column("Created")
    for project in projects:
        table.add_row(
            escape(str(project.get("id", ""))),
            escape(str(project.get("title") or "")),
            escape(str(project.get("project_type") or "")),
            escape(str(project.get("demo_link") or "")),
            escape(str(project.get("created_at") or "")),
        )
    console.print(table)


def _render_profile(profile: Dict[str, Any]) -> None:
    lines = [
        f"[bold]{escape(profile.get('full_name') or '(no name)')}[/bold]",
        escape(profile.get("email") or ""),
        escape(profile.get("phone") or ""),
        "",
        escape(profile.get("bio") or ""),
    ]
    skills = profile.get("skills") or []
    interests = profile.get("interests") or []
    if skills:
        lines.append(f"\nSkills: {escape(', '.join(skills))}")
    if interests:
        lines.append(f"Interests: {escape(', '.join(interests))}")
    console.print(Panel.fit("\n".join(lines), title="Profile"))


def cmd_register(gateway: ProfileDataGateway, args: argparse.Namespace) -> int:
    result = gateway.register(args.email, _read_password(args), args.full_name)
    return _report(result, f"Account created for {args.email}")


def cmd_login(gateway: ProfileDataGateway, args: argparse.Namespace) -> int:
    result = gateway.login(args.email, _read_password(args))
    return _report(result, f"Signed in as {args.email}")


def cmd_logout(gateway: ProfileDataGateway, args: argparse.Namespace) -> int:
    return _report(gateway.logout(), "Signed out")


def cmd_whoami(gateway: ProfileDataGateway, args: argparse.Namespace) -> int:
    status = gateway.check_login()
    if not status.logged_in:
        console.print("Not signed in.")
        return 1
    user = status.user or {}
    console.print(f"Signed in as [bold]{escape(str(user.get('email') or user.get('id')))}[/bold]")
    return 0


def cmd_profile(gateway: ProfileDataGateway, args: argparse.Namespace) -> int:
    profile = gateway.get_profile()
    if not profile:
        console.print("[yellow]No profile found. Sign in first.[/yellow]")
        return 1
    _render_profile(profile)
    return 0


def cmd_projects(gateway: ProfileDataGateway, args: argparse.Namespace) -> int:
    _render_projects(gateway.get_projects())
    return 0


def cmd_add_project(gateway: ProfileDataGateway, args: argparse.Namespace) -> int:
    result = gateway.add_project(args.title, args.description, args.type, args.demo)
    return _report(result, f"Added project '{args.title}'")


def cmd_share(gateway: ProfileDataGateway, args: argparse.Namespace) -> int:
    result = gateway.create_portfolio_link()
    return _report(result, f"Share link: {result.get('url')}")


def cmd_cv(gateway: ProfileDataGateway, args: argparse.Namespace) -> int:
    result = gateway.generate_cv()
    return _report(result, f"CV written to {result.get('path')}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="portfolio-gateway",
        description="Manage a Supabase-backed portfolio profile from the terminal.",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    register = subparsers.add_parser("register", help="Create an account and profile")
    register.add_argument("email")
    register.add_argument("full_name")
    register.add_argument("--password", help=argparse.SUPPRESS)
    register.set_defaults(func=cmd_register)

    login = subparsers.add_parser("login", help="Sign in and remember the session")
    login.add_argument("email")
    login.add_argument("--password", help=argparse.SUPPRESS)
    login.set_defaults(func=cmd_login)

    subparsers.add_parser("logout", help="Sign out").set_defaults(func=cmd_logout)
    subparsers.add_parser("whoami", help="Show the signed-in user").set_defaults(func=cmd_whoami)
    subparsers.add_parser("profile", help="Show your profile").set_defaults(func=cmd_profile)
    subparsers.add_parser("projects", help="List your projects").set_defaults(func=cmd_projects)

    add_project = subparsers.add_parser("add-project", help="Add a project")
    add_project.add_argument("title")
    add_project.add_argument("-d", "--description", default="")
    add_project.add_argument("-t", "--type", default="")
    add_project.add_argument("--demo", default=None, help="Demo URL")
    add_project.set_defaults(func=cmd_add_project)

    subparsers.add_parser("share", help="Create a public portfolio link").set_defaults(func=cmd_share)
    subparsers.add_parser("cv", help="Generate and open your CV").set_defaults(func=cmd_cv)
    return parser


def main(argv: Optional[Sequence[str]] = None, gateway_factory: Optional[GatewayFactory] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        gateway = (gateway_factory or ProfileDataGateway.from_env)()
    except ConfigError as exc:
        console.print(f"[red]✗[/red] {exc}")
        return 1

    return args.func(gateway, args)


if __name__ == "__main__":
    sys.exit(main())
