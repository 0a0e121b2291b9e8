"""Query and QueryHandler base classes with authorization gate."""

from abc import ABCMeta, abstractmethod
from collections.abc import Callable, Coroutine
from dataclasses import dataclass
from functools import wraps
from typing import Any, ClassVar, Generic, TypeVar, dataclass_transform

from pydantic import BaseModel

from idgate.domain.shared.authorization.gate import Gate, enforce


class Query(BaseModel): ...


class Result(BaseModel): ...


Q = TypeVar("Q", bound=Query)
R = TypeVar("R", bound=Result)

_HandlerMethod = Callable[..., Coroutine[Any, Any, Any]]


def _wrap_query_run_with_auth(original_run: _HandlerMethod) -> _HandlerMethod:
    """Wrap the run() method with __auth__ gate evaluation."""

    @wraps(original_run)
    async def auth_wrapped_run(self: Any, query: Any) -> Any:
        enforce(getattr(type(self), "__auth__", None), self)
        return await original_run(self, query)

    return auth_wrapped_run


@dataclass_transform()
class _QueryHandlerMeta(ABCMeta):
    """Metaclass that combines ABC with auto-dataclass and __auth__ gate for subclasses."""

    def __new__(mcs, name: str, bases: tuple[type, ...], namespace: dict[str, Any]):
        cls = super().__new__(mcs, name, bases, namespace)
        if any(isinstance(b, mcs) for b in bases):
            cls = dataclass(cls)

            original_run = cls.__dict__.get("run")
            if original_run is not None:
                cls.run = _wrap_query_run_with_auth(original_run)

        return cls


class QueryHandler(Generic[Q, R], metaclass=_QueryHandlerMeta):
    """Base class for query handlers. Subclasses are automatically dataclasses.

    Queries are never public by marker; declare the gate explicitly:
        class ListWhitelistHandler(QueryHandler[ListWhitelist, WhitelistResult]):
            __auth__ = admin_only()
            principal: Principal
    """

    __auth__: ClassVar[Gate]

    @abstractmethod
    async def run(self, query: Q) -> R: ...
