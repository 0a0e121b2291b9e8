"""Port for attaching a pending artifact (e.g. an analysis report) to a user."""

from abc import abstractmethod
from enum import StrEnum
from typing import Protocol

from idgate.domain.auth.model.value import UserId
from idgate.domain.shared.port import Port


class AssociationOutcome(StrEnum):
    SKIPPED = "skipped"
    ASSOCIATED = "associated"
    FAILED = "failed"


class ArtifactAssociator(Port, Protocol):
    """Best-effort collaborator. Implementations never raise; failures become FAILED."""

    @abstractmethod
    async def associate(self, artifact_id: str, user_id: UserId) -> AssociationOutcome: ...
