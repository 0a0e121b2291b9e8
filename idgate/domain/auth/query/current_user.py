"""Query for the signed-in user's profile."""

from typing import Any

from idgate.domain.auth.model.principal import Principal
from idgate.domain.auth.service.oauth import public_user
from idgate.domain.auth.service.provider import display_name
from idgate.domain.shared.authorization.gate import authenticated
from idgate.domain.shared.query import Query, QueryHandler, Result


class GetCurrentUser(Query): ...


class CurrentUserResult(Result):
    user: dict[str, Any]
    display_name: str


class GetCurrentUserHandler(QueryHandler[GetCurrentUser, CurrentUserResult]):
    __auth__ = authenticated()
    principal: Principal

    async def run(self, query: GetCurrentUser) -> CurrentUserResult:
        user = self.principal.user
        return CurrentUserResult(user=public_user(user), display_name=display_name(user))
