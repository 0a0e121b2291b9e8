"""Custom Dishka scopes for idgate."""

from dishka import BaseScope, new_scope


class Scope(BaseScope):  # type: ignore[misc]  # BaseScope is designed to be subclassed
    """Dependency injection scopes.

    Hierarchy: APP -> UOW

    - APP: Application lifetime (engine, HTTP client, provider clients, cipher)
    - UOW: Unit of Work, one per HTTP request or CLI operation (session, repositories,
      services, handlers, the caller's identity)
    """

    APP = new_scope("APP")
    UOW = new_scope("UOW")
