"""Port for encrypting provider access tokens at rest."""

from abc import abstractmethod
from typing import Protocol

from idgate.domain.shared.port import Port


class TokenCipher(Port, Protocol):
    @abstractmethod
    def encrypt(self, plaintext: str) -> str: ...

    @abstractmethod
    def decrypt(self, stored: str) -> str:
        """Reverse encrypt(). Values that were never encrypted come back unchanged."""
        ...
