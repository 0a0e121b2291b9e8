"""Whitelist oracle: which email addresses may use the application."""

import logging
from collections.abc import Iterable

from idgate.domain.auth.model.user import User
from idgate.domain.auth.model.value import is_valid_email, normalize_email
from idgate.domain.auth.model.whitelist import WhitelistChange, WhitelistEntry, WhitelistRemoval
from idgate.domain.auth.port.repository import WhitelistRepository
from idgate.domain.shared.service import Service

logger = logging.getLogger(__name__)


def split_emails(emails: str | Iterable[str]) -> list[str]:
    """Accept "a@x.com, b@x.com" or a list; return normalized, non-empty entries."""
    items = [emails] if isinstance(emails, str) else emails
    parts = (part for item in items for part in item.split(","))
    return [e for e in (normalize_email(part) for part in parts) if e]


class WhitelistService(Service):
    _repo: WhitelistRepository

    async def is_authorized(self, email: str | None) -> bool:
        normalized = normalize_email(email)
        if not normalized:
            return False
        return await self._repo.exists(normalized)

    async def is_user_authorized(self, user: User) -> bool:
        """True if any of the user's known addresses is whitelisted."""
        for email in user.known_emails():
            if await self.is_authorized(email):
                return True
        return False

    async def add(self, emails: str | Iterable[str]) -> WhitelistChange:
        """Add addresses. Malformed and already-present ones are skipped."""
        change = WhitelistChange()
        for email in split_emails(emails):
            if is_valid_email(email) and await self._repo.add(email):
                change.added.append(email)
            else:
                change.skipped.append(email)

        logger.info("Whitelist add: added=%d, skipped=%d", len(change.added), len(change.skipped))
        return change

    async def remove(self, emails: str | Iterable[str]) -> WhitelistRemoval:
        removal = WhitelistRemoval()
        for email in split_emails(emails):
            if await self._repo.remove(email):
                removal.removed.append(email)
            else:
                removal.not_found.append(email)

        logger.info(
            "Whitelist remove: removed=%d, not_found=%d",
            len(removal.removed),
            len(removal.not_found),
        )
        return removal

    async def list(self) -> list[WhitelistEntry]:
        return await self._repo.list_all()
