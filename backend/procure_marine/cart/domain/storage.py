from abc import ABC, abstractmethod
from contextlib import nullcontext
from typing import ContextManager, Optional


class AbstractKeyValueStorage(ABC):
    """Interface abstraite d'un stockage clé/valeur durable (équivalent d'un localStorage)."""

    @abstractmethod
    def read(self, key: str) -> Optional[str]:
        """Retourne la valeur stockée, ou None si la clé est absente.

        Raises:
            StorageException: Si le backend ne peut pas être lu.
        """
        raise NotImplementedError

    @abstractmethod
    def write(self, key: str, value: str) -> None:
        """Enregistre (ou remplace) la valeur associée à la clé.

        Raises:
            StorageException: Si le backend ne peut pas être écrit.
        """
        raise NotImplementedError

    def lock(self, key: str) -> ContextManager:
        """Verrou couvrant un cycle lecture/écriture sur la clé (aucun par défaut)."""
        return nullcontext()
