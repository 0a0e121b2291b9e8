"""Base classes for domain entities and aggregates."""

from pydantic import BaseModel, ConfigDict


class Entity(BaseModel):
    """A domain object with identity. Validated on assignment."""

    model_config = ConfigDict(validate_assignment=True)


class Aggregate(Entity):
    """Consistency boundary. Repositories load and save whole aggregates."""
