"""Command and CommandHandler base classes with authorization gate."""

from abc import ABCMeta, abstractmethod
from collections.abc import Callable, Coroutine
from dataclasses import dataclass
from functools import wraps
from typing import Any, ClassVar, Generic, TypeVar, dataclass_transform

from pydantic import BaseModel

from idgate.domain.shared.authorization.gate import Gate, enforce


class Command(BaseModel):
    __public__: ClassVar[bool] = False


class Result(BaseModel): ...


C = TypeVar("C", bound=Command)
R = TypeVar("R", bound=Result)

# Unbound async handler method: (self, cmd) -> Coroutine -> Result
_HandlerMethod = Callable[..., Coroutine[Any, Any, Any]]


def _wrap_run_with_auth(original_run: _HandlerMethod) -> _HandlerMethod:
    """Wrap the run() method with __auth__ gate evaluation."""

    @wraps(original_run)
    async def auth_wrapped_run(self: Any, cmd: Any) -> Any:
        if not getattr(type(cmd), "__public__", False):
            enforce(getattr(type(self), "__auth__", None), self)
        return await original_run(self, cmd)

    return auth_wrapped_run


@dataclass_transform()
class _CommandHandlerMeta(ABCMeta):
    """Metaclass that combines ABC with auto-dataclass and __auth__ gate for subclasses."""

    def __new__(mcs, name: str, bases: tuple[type, ...], namespace: dict[str, Any]):
        cls = super().__new__(mcs, name, bases, namespace)
        if any(isinstance(b, mcs) for b in bases):
            cls = dataclass(cls)

            original_run = cls.__dict__.get("run")
            if original_run is not None:
                cls.run = _wrap_run_with_auth(original_run)

        return cls


class CommandHandler(Generic[C, R], metaclass=_CommandHandlerMeta):
    """Base class for command handlers. Subclasses are automatically dataclasses.

    Declare __auth__ unless the command is __public__:
        class AddWhitelistEmailsHandler(CommandHandler[AddWhitelistEmails, WhitelistChangeResult]):
            __auth__ = admin_only()
            principal: Principal
    """

    __auth__: ClassVar[Gate]

    @abstractmethod
    async def run(self, cmd: C) -> R: ...
