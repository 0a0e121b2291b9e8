"""Service base class: subclasses become keyword-only dataclasses."""

from dataclasses import dataclass
from typing import dataclass_transform


@dataclass_transform(kw_only_default=True)
class _ServiceMeta(type):
    """Metaclass that applies @dataclass(kw_only=True) to subclasses."""

    def __new__(mcs, name: str, bases: tuple, namespace: dict):
        cls = super().__new__(mcs, name, bases, namespace)
        if any(isinstance(b, mcs) for b in bases):
            return dataclass(cls, kw_only=True)
        return cls


class Service(metaclass=_ServiceMeta):
    """Base class for domain services.

    Dependencies are declared as private fields and passed by keyword:
        TokenService(_config=config.auth.jwt, _whitelist=whitelist)
    """
