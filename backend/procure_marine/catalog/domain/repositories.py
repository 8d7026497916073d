from abc import ABC, abstractmethod
from typing import Tuple

from .entities import Category, Product

# Interface abstraite pour la source de données du catalogue.
# Le catalogue est statique: lecture seule, chargé une fois au démarrage.


class AbstractCatalogRepository(ABC):
    """Interface pour le repository (lecture seule) du catalogue."""

    @abstractmethod
    def list_products(self) -> Tuple[Product, ...]:
        """Retourne tous les produits, dans l'ordre de la source."""
        raise NotImplementedError

    @abstractmethod
    def list_categories(self) -> Tuple[Category, ...]:
        """Retourne l'arbre complet des catégories (avec sous-catégories)."""
        raise NotImplementedError
