from dishka import AsyncContainer, make_async_container

from idgate.config import Config
from idgate.domain.auth.util.di import AuthProvider
from idgate.infrastructure.auth import AuthInfraProvider
from idgate.infrastructure.persistence import PersistenceProvider
from idgate.util.di.scope import Scope


def create_container(config: Config | None = None) -> AsyncContainer:
    # Pydantic Settings populates from env vars at runtime
    config = config or Config()

    return make_async_container(
        PersistenceProvider(),
        AuthProvider(),
        AuthInfraProvider(),
        context={Config: config},
        scopes=Scope,  # type: ignore[arg-type]  # Custom scope class
    )
