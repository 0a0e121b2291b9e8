"""Query listing whitelist entries."""

from datetime import datetime

from pydantic import BaseModel

from idgate.domain.auth.model.principal import Principal
from idgate.domain.auth.service.whitelist import WhitelistService
from idgate.domain.shared.authorization.gate import admin_only
from idgate.domain.shared.query import Query, QueryHandler, Result


class ListWhitelist(Query): ...


class WhitelistItem(BaseModel):
    email: str
    created_at: datetime


class ListWhitelistResult(Result):
    entries: list[WhitelistItem]


class ListWhitelistHandler(QueryHandler[ListWhitelist, ListWhitelistResult]):
    __auth__ = admin_only()
    principal: Principal
    whitelist_service: WhitelistService

    async def run(self, query: ListWhitelist) -> ListWhitelistResult:
        entries = await self.whitelist_service.list()
        return ListWhitelistResult(
            entries=[WhitelistItem(email=e.email, created_at=e.created_at) for e in entries]
        )
