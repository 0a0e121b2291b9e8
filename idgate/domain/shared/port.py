"""Base marker for domain ports (outbound interfaces implemented by infrastructure)."""

from typing import Protocol


class Port(Protocol):
    """Marker base for ports. Concrete adapters subclass the port they implement."""
