"""Base class for idgate DI providers."""

from dishka import Provider as DishkaProvider

from idgate.util.di.scope import Scope


class Provider(DishkaProvider):
    """Dishka provider defaulting to application scope.

    Per-request factories must say ``scope=Scope.UOW`` explicitly.
    """

    scope = Scope.APP
