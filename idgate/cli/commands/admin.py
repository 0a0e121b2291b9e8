"""Grant or revoke the admin flag directly in the database.

Runs without a server so the first administrator can be bootstrapped.
"""

import asyncio
import sys

import cyclopts

from idgate.application.di import create_container
from idgate.cli.console import get_console
from idgate.config import Config
from idgate.domain.auth.model.user import User
from idgate.domain.auth.model.value import UserId
from idgate.domain.auth.port.repository import UserRepository
from idgate.infrastructure.persistence.migrate import run_migrations
from idgate.util.di.scope import Scope

app = cyclopts.App(name="admin", help="Administrative commands")


async def _find_user(users: UserRepository, email_or_id: str) -> User | None:
    try:
        return await users.get(UserId.parse(email_or_id))
    except ValueError:
        return await users.find_by_email(email_or_id)


async def set_admin(email_or_id: str, admin: bool, config: Config | None = None) -> User | None:
    """Set the admin flag on a user looked up by id or email. None if no such user."""
    config = config or Config()
    if config.database.auto_migrate and config.database.url.startswith("sqlite"):
        await asyncio.to_thread(run_migrations, config.database.url)

    container = create_container(config)
    try:
        async with container(scope=Scope.UOW) as uow:
            users = await uow.get(UserRepository)
            user = await _find_user(users, email_or_id)
            if user is None:
                return None
            user.admin = admin
            user.touch()
            await users.update(user)
            return user
    finally:
        await container.close()


def _run(email_or_id: str, admin: bool) -> None:
    console = get_console()
    user = asyncio.run(set_admin(email_or_id, admin))
    if user is None:
        console.error(f"No user found for {email_or_id}", hint="The user must log in once first")
        sys.exit(1)
    verb = "Granted admin to" if admin else "Revoked admin from"
    console.success(f"{verb} {user.email or user.id}")


@app.command
def grant(email_or_id: str, /) -> None:
    """Make a user an administrator.

    Args:
        email_or_id: User id or any email on the account.
    """
    _run(email_or_id, True)


@app.command
def revoke(email_or_id: str, /) -> None:
    """Remove a user's administrator flag.

    Args:
        email_or_id: User id or any email on the account.
    """
    _run(email_or_id, False)
