"""Administrative whitelist commands."""

from pydantic import Field

from idgate.domain.auth.model.principal import Principal
from idgate.domain.auth.service.whitelist import WhitelistService
from idgate.domain.shared.authorization.gate import admin_only
from idgate.domain.shared.command import Command, CommandHandler, Result


class AddWhitelistEmails(Command):
    emails: str | list[str]  # "a@x.com,b@x.com" or a list


class AddWhitelistEmailsResult(Result):
    added: list[str] = Field(default_factory=list)
    skipped: list[str] = Field(default_factory=list)


class AddWhitelistEmailsHandler(CommandHandler[AddWhitelistEmails, AddWhitelistEmailsResult]):
    __auth__ = admin_only()
    principal: Principal
    whitelist_service: WhitelistService

    async def run(self, cmd: AddWhitelistEmails) -> AddWhitelistEmailsResult:
        change = await self.whitelist_service.add(cmd.emails)
        return AddWhitelistEmailsResult(added=change.added, skipped=change.skipped)


class RemoveWhitelistEmails(Command):
    emails: str | list[str]


class RemoveWhitelistEmailsResult(Result):
    removed: list[str] = Field(default_factory=list)
    not_found: list[str] = Field(default_factory=list)


class RemoveWhitelistEmailsHandler(
    CommandHandler[RemoveWhitelistEmails, RemoveWhitelistEmailsResult]
):
    __auth__ = admin_only()
    principal: Principal
    whitelist_service: WhitelistService

    async def run(self, cmd: RemoveWhitelistEmails) -> RemoveWhitelistEmailsResult:
        removal = await self.whitelist_service.remove(cmd.emails)
        return RemoveWhitelistEmailsResult(removed=removal.removed, not_found=removal.not_found)
