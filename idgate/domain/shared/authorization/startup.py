"""Startup validation for handler authorization declarations."""

import logging
from typing import get_args, get_origin

from idgate.domain.shared.authorization.gate import Gate
from idgate.domain.shared.command import CommandHandler
from idgate.domain.shared.error import ConfigurationError
from idgate.domain.shared.query import QueryHandler

logger = logging.getLogger(__name__)


def _get_dto_type(handler_cls: type) -> type | None:
    """Extract the Command/Query type from a handler's generic bases."""
    for base in getattr(handler_cls, "__orig_bases__", []):
        origin = get_origin(base)
        if origin in (CommandHandler, QueryHandler):
            args = get_args(base)
            if args and isinstance(args[0], type):
                return args[0]
    return None


def check_handler(handler_cls: type) -> str | None:
    """Return a violation message for a handler lacking a usable gate, else None."""
    dto_cls = _get_dto_type(handler_cls)
    if dto_cls is not None and getattr(dto_cls, "__public__", False):
        return None

    if not isinstance(getattr(handler_cls, "__auth__", None), Gate):
        return (
            f"Handler {handler_cls.__name__} has no __auth__ declaration "
            f"and its command/query is not __public__"
        )
    return None


def registered_handlers() -> list[type]:
    """CommandHandler and QueryHandler subclasses defined in the idgate package."""
    handlers = [*CommandHandler.__subclasses__(), *QueryHandler.__subclasses__()]
    return [h for h in handlers if h.__module__.startswith("idgate.")]


def validate_all_handlers() -> None:
    """Scan all registered CommandHandler and QueryHandler subclasses.

    Raises ConfigurationError listing all handlers missing __auth__ declarations.
    """
    handlers = registered_handlers()
    violations = [v for v in (check_handler(h) for h in handlers) if v is not None]

    if violations:
        raise ConfigurationError(
            f"Authorization validation failed for {len(violations)} handler(s):\n"
            + "\n".join(f"  - {v}" for v in violations)
        )

    logger.info("Authorization startup validation passed for %d handlers", len(handlers))
