"""User administration script for Rollcall.

Commands:
    add       Add a new user
    list      List all users
    disable   Disable a user account
    enable    Enable a user account
    remove    Remove a user account
    token     Issue an access token for a user
"""

import argparse
import asyncio
import sys
from datetime import timedelta
from typing import Optional

from rollcall.database import close_db, init_db
from rollcall.models.user import User, UserRole
from rollcall.services.auth import create_access_token


async def _find_user(email: str) -> User:
    user = await User.find_one(User.email == email)
    if user is None:
        print(f"Error: User '{email}' not found.")
        sys.exit(1)
    return user


async def add_user(email: str, name: str, role: UserRole, phone: Optional[str] = None) -> None:
    """Add a new user."""
    if await User.find_one(User.email == email):
        print(f"Error: User '{email}' already exists.")
        sys.exit(1)

    user = User(email=email, name=name, role=role, phone=phone)
    await user.insert()
    print(f"User '{email}' created successfully as {role.value}.")


async def list_users() -> None:
    """List all users."""
    users = await User.find_all().sort(+User.email).to_list()
    if not users:
        print("No users found.")
        return

    print(f"{'Email':<32} {'Name':<24} {'Role':<12} {'Active':<6}")
    print("-" * 78)
    for user in users:
        active = "Yes" if user.is_active else "No"
        print(f"{user.email:<32} {user.name:<24} {user.role.value:<12} {active:<6}")


async def set_active(email: str, active: bool) -> None:
    """Enable or disable a user account."""
    user = await _find_user(email)
    state = "active" if active else "disabled"
    if user.is_active == active:
        print(f"User '{email}' is already {state}.")
        return

    user.is_active = active
    await user.save()
    print(f"User '{email}' is now {state}.")


async def remove_user(email: str, force: bool = False) -> None:
    """Remove a user account."""
    user = await _find_user(email)
    if not force:
        confirm = input(f"Are you sure you want to remove user '{email}'? [y/N]: ")
        if confirm.lower() != "y":
            print("Aborted.")
            return

    await user.delete()
    print(f"User '{email}' has been removed.")


async def issue_token(email: str, minutes: int) -> None:
    """Print a bearer token for an active user."""
    user = await _find_user(email)
    if not user.is_active:
        print(f"Error: User '{email}' is disabled.")
        sys.exit(1)
    print(create_access_token({"sub": user.email}, expires_delta=timedelta(minutes=minutes)))


async def _run(coro) -> None:
    await init_db()
    try:
        await coro
    finally:
        await close_db()


def main() -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="User administration for Rollcall",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    add_parser = subparsers.add_parser("add", help="Add a new user")
    add_parser.add_argument("email", help="Email address of the new user")
    add_parser.add_argument("--name", "-n", required=True, help="Display name")
    add_parser.add_argument("--phone", help="Phone number")
    add_parser.add_argument("--admin", "-a", action="store_true", help="Make user a super admin")

    subparsers.add_parser("list", help="List all users")

    for command, help_text in (("disable", "Disable a user account"), ("enable", "Enable a user account")):
        sub = subparsers.add_parser(command, help=help_text)
        sub.add_argument("email", help="Email of the user")

    remove_parser = subparsers.add_parser("remove", help="Remove a user account")
    remove_parser.add_argument("email", help="Email of the user")
    remove_parser.add_argument("--force", "-f", action="store_true", help="Skip confirmation")

    token_parser = subparsers.add_parser("token", help="Issue an access token")
    token_parser.add_argument("email", help="Email of the user")
    token_parser.add_argument("--minutes", "-m", type=int, default=120, help="Token lifetime in minutes")

    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        return 1

    if args.command == "add":
        role = UserRole.SUPER_ADMIN if args.admin else UserRole.CELL_LEADER
        coro = add_user(args.email, args.name, role, args.phone)
    elif args.command == "list":
        coro = list_users()
    elif args.command in ("disable", "enable"):
        coro = set_active(args.email, args.command == "enable")
    elif args.command == "remove":
        coro = remove_user(args.email, args.force)
    else:
        coro = issue_token(args.email, args.minutes)

    try:
        asyncio.run(_run(coro))
    except KeyboardInterrupt:
        print("\nAborted.")
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
