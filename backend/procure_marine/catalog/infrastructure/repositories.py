import json
import logging
from decimal import Decimal
from pathlib import Path
from typing import Iterable, List, Tuple, Union

from pydantic import TypeAdapter, ValidationError

from ..domain.entities import Category, Product
from ..domain.exceptions import CatalogDataException
from ..domain.repositories import AbstractCatalogRepository

logger = logging.getLogger(__name__)

PRODUCTS_FILE = "products.json"
CATEGORIES_FILE = "categories.json"

_products_adapter = TypeAdapter(List[Product])
_categories_adapter = TypeAdapter(List[Category])


class StaticCatalogRepository(AbstractCatalogRepository):
    """Catalogue en mémoire, figé à la construction."""

    def __init__(self, products: Iterable[Product], categories: Iterable[Category]):
        self._products = tuple(products)
        self._categories = tuple(categories)

    def list_products(self) -> Tuple[Product, ...]:
        return self._products

    def list_categories(self) -> Tuple[Category, ...]:
        return self._categories


class JsonCatalogRepository(StaticCatalogRepository):
    """Charge `products.json` et `categories.json` depuis un dossier, une seule fois."""

    def __init__(self, data_dir: Union[str, Path]):
        self.data_dir = Path(data_dir)
        products = self._load(PRODUCTS_FILE, _products_adapter)
        categories = self._load(CATEGORIES_FILE, _categories_adapter)
        super().__init__(products, categories)
        logger.info(
            f"[JsonCatalogRepository] Catalogue chargé depuis {self.data_dir}: "
            f"{len(products)} produits, {len(categories)} catégories racines"
        )

    def _load(self, filename: str, adapter: TypeAdapter) -> list:
        path = self.data_dir / filename
        try:
            raw = json.loads(path.read_text(encoding="utf-8"), parse_float=Decimal)
        except FileNotFoundError as e:
            logger.error(f"[JsonCatalogRepository] Fichier introuvable: {path}")
            raise CatalogDataException(f"Catalog file not found: {path}") from e
        except json.JSONDecodeError as e:
            logger.error(f"[JsonCatalogRepository] JSON invalide dans {path}: {e}")
            raise CatalogDataException(f"Invalid JSON in {path}: {e}") from e

        try:
            return adapter.validate_python(raw)
        except ValidationError as e:
            logger.error(f"[JsonCatalogRepository] Données invalides dans {path}: {e}")
            raise CatalogDataException(f"Invalid catalog data in {path}: {e}") from e
