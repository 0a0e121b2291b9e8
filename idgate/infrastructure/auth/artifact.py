"""Adapters for attaching a pending artifact to a user after login."""

import logging
from urllib.parse import quote

import httpx

from idgate.config import ArtifactsConfig
from idgate.domain.auth.model.value import UserId
from idgate.domain.auth.port.artifact import ArtifactAssociator, AssociationOutcome

logger = logging.getLogger(__name__)


class HttpArtifactAssociator(ArtifactAssociator):
    """Calls ``POST {associate_url}/{artifact_id}/owner`` on the artifact service."""

    def __init__(self, config: ArtifactsConfig, http_client: httpx.AsyncClient) -> None:
        self._config = config
        self._http = http_client

    async def associate(self, artifact_id: str, user_id: UserId) -> AssociationOutcome:
        url = f"{self._config.associate_url.rstrip('/')}/{quote(artifact_id, safe='')}/owner"
        headers = {}
        if self._config.api_key:
            headers["Authorization"] = f"Bearer {self._config.api_key}"
        try:
            response = await self._http.post(url, json={"userId": str(user_id)}, headers=headers)
            response.raise_for_status()
        except httpx.HTTPError as e:
            logger.warning("Artifact association failed: artifact=%s, error=%s", artifact_id, e)
            return AssociationOutcome.FAILED

        logger.info("Associated artifact %s with user %s", artifact_id, user_id)
        return AssociationOutcome.ASSOCIATED


class NullArtifactAssociator(ArtifactAssociator):
    """Used when no artifact service is configured."""

    async def associate(self, artifact_id: str, user_id: UserId) -> AssociationOutcome:
        logger.debug("No artifact service configured; not associating %s", artifact_id)
        return AssociationOutcome.SKIPPED
