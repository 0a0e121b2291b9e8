"""Whitelist entries and the results of administrative changes."""

from dataclasses import dataclass, field
from datetime import datetime

from idgate.domain.shared.model.entity import Entity


class WhitelistEntry(Entity):
    """A normalized email address allowed past the access guard."""

    email: str
    created_at: datetime


@dataclass
class WhitelistChange:
    """Outcome of a bulk add."""

    added: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)


@dataclass
class WhitelistRemoval:
    """Outcome of a bulk remove."""

    removed: list[str] = field(default_factory=list)
    not_found: list[str] = field(default_factory=list)
