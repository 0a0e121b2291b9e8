"""Access guard: per-request whitelist check for authenticated principals."""

import logging

from idgate.domain.auth.model.identity import Identity
from idgate.domain.auth.model.principal import Principal
from idgate.domain.auth.service.whitelist import WhitelistService
from idgate.domain.shared.error import ForbiddenError
from idgate.domain.shared.service import Service

logger = logging.getLogger(__name__)

NOT_WHITELISTED = "Your email is not whitelisted. Please contact an administrator."


class AccessGuard(Service):
    """Decides whether an authenticated principal may proceed.

    Anonymous traffic is not this guard's concern. For principals the
    ``whitelisted`` claim is trusted when present (no I/O); tokens without
    the claim fall back to a whitelist lookup over the user's addresses.
    With ``_recheck_whitelist`` the claim is ignored and every request does
    the lookup.
    """

    _whitelist: WhitelistService
    _recheck_whitelist: bool = False

    async def check(self, identity: Identity) -> None:
        """Raise ForbiddenError if the principal may not proceed."""
        if not isinstance(identity, Principal):
            return

        claim = identity.claims.whitelisted
        if claim is not None and not self._recheck_whitelist:
            if not claim:
                logger.info("Access denied by token claim: user_id=%s", identity.user_id)
                raise ForbiddenError(NOT_WHITELISTED, code="not_whitelisted")
            return

        emails = identity.user.known_emails()
        if not emails:
            logger.info("Access denied, no email on record: user_id=%s", identity.user_id)
            raise ForbiddenError("User email not found", code="email_not_found")

        for email in emails:
            if await self._whitelist.is_authorized(email):
                return

        logger.info("Access denied by whitelist lookup: user_id=%s", identity.user_id)
        raise ForbiddenError(NOT_WHITELISTED, code="not_whitelisted")
