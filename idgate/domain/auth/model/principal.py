"""Principal: authenticated identity resolved per request from a bearer token."""

from dataclasses import dataclass

from idgate.domain.auth.model.claims import AccessClaims
from idgate.domain.auth.model.identity import Identity
from idgate.domain.auth.model.user import User
from idgate.domain.auth.model.value import UserId


@dataclass(frozen=True)
class Principal(Identity):
    """The authenticated user behind the current request.

    Carries the verified claims alongside the freshly loaded user so the
    access guard can choose between the claim and a database check.
    """

    user: User
    claims: AccessClaims

    @property
    def user_id(self) -> UserId:
        return self.user.id
