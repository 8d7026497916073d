import logging
import math
import unicodedata
from typing import Iterable, List, Optional, Set, Tuple

from ..domain.entities import Category, Product, StockStatus
from ..domain.repositories import AbstractCatalogRepository
from .schemas import PaginatedProductResponse, ProductFilters, ProductSortOption

logger = logging.getLogger(__name__)

# Rang de disponibilité pour le tri "availability"
AVAILABILITY_RANK = {
    StockStatus.IN_STOCK: 0,
    StockStatus.ON_REQUEST: 1,
    StockStatus.OUT_OF_STOCK: 2,
}


def _collation_key(value: str) -> Tuple[str, str]:
    """Clé de tri insensible à la casse et aux accents, départagée par la valeur brute."""
    decomposed = unicodedata.normalize("NFKD", value)
    folded = "".join(c for c in decomposed if not unicodedata.combining(c)).casefold()
    return folded, value


class CatalogService:
    """Service applicatif de consultation du catalogue (lecture seule, sans effet de bord)."""

    def __init__(self, catalog_repo: AbstractCatalogRepository):
        self.catalog_repo = catalog_repo

    # --- Catégories ---

    def list_categories(self) -> List[Category]:
        return list(self.catalog_repo.list_categories())

    def find_category_by_slug(self, slug: str) -> Optional[Category]:
        """Cherche dans les catégories racines puis dans leurs sous-catégories."""
        for category in self.catalog_repo.list_categories():
            if category.slug == slug:
                return category
            for subcategory in category.subcategories:
                if subcategory.slug == slug:
                    return subcategory
        return None

    def resolve_category_and_descendant_ids(self, category_id: str) -> Set[str]:
        """
        Retourne l'ID de la catégorie et ceux de ses sous-catégories directes.

        Un seul niveau est développé; pour une sous-catégorie, seul son propre ID est retourné.
        """
        ids = {category_id}
        for category in self.catalog_repo.list_categories():
            if category.id == category_id:
                ids.update(sub.id for sub in category.subcategories)
                break
        return ids

    # --- Produits ---

    def list_products(self) -> List[Product]:
        return list(self.catalog_repo.list_products())

    def find_product_by_slug(self, slug: str) -> Optional[Product]:
        return next((p for p in self.catalog_repo.list_products() if p.slug == slug), None)

    def find_product_by_id(self, product_id: str) -> Optional[Product]:
        return next((p for p in self.catalog_repo.list_products() if p.id == product_id), None)

    def list_featured_products(self, limit: int = 6) -> List[Product]:
        featured = [p for p in self.catalog_repo.list_products() if p.featured]
        return featured[:limit]

    def list_brands(self) -> List[str]:
        brands = {p.brand for p in self.catalog_repo.list_products() if p.brand}
        return sorted(brands, key=_collation_key)

    def list_products_by_category(self, slug: str, limit: Optional[int] = None) -> List[Product]:
        category = self.find_category_by_slug(slug)
        if not category:
            logger.debug(f"[CatalogService] Catégorie '{slug}' inconnue, aucun produit.")
            return []
        products = self.filter_products(ProductFilters(category_ids=[category.id]))
        if limit:
            products = products[:limit]
        return products

    def filter_products(self, filters: ProductFilters) -> List[Product]:
        """Applique les filtres actifs (combinés en ET) et retourne une nouvelle liste."""
        products: Iterable[Product] = self.catalog_repo.list_products()

        if filters.category_ids:
            expanded: Set[str] = set()
            for category_id in filters.category_ids:
                expanded |= self.resolve_category_and_descendant_ids(category_id)
            products = [p for p in products if expanded.intersection(p.category_ids)]

        if filters.brands:
            brands = set(filters.brands)
            products = [p for p in products if p.brand and p.brand in brands]

        if filters.stock_statuses:
            statuses = set(filters.stock_statuses)
            products = [p for p in products if p.stock_status in statuses]

        query = (filters.text or "").strip().lower()
        if query:
            products = [
                p for p in products
                if query in p.name.lower()
                or query in p.part_number.lower()
                or query in p.description.lower()
            ]

        return list(products)

    def sort_products(self, products: Iterable[Product], sort_option: ProductSortOption) -> List[Product]:
        """Tri stable; l'entrée n'est jamais modifiée."""
        products = list(products)
        if sort_option == ProductSortOption.NAME_ASC:
            return sorted(products, key=lambda p: _collation_key(p.name))
        if sort_option == ProductSortOption.NAME_DESC:
            return sorted(products, key=lambda p: _collation_key(p.name), reverse=True)
        if sort_option == ProductSortOption.PART_NUMBER:
            return sorted(products, key=lambda p: _collation_key(p.part_number))
        if sort_option == ProductSortOption.AVAILABILITY:
            return sorted(products, key=lambda p: AVAILABILITY_RANK.get(p.stock_status, len(AVAILABILITY_RANK)))
        return products

    def search_catalog(
        self,
        filters: ProductFilters,
        sort_option: ProductSortOption = ProductSortOption.NAME_ASC,
        page: int = 1,
        page_size: int = 12,
    ) -> PaginatedProductResponse:
        """Filtre, trie puis pagine (page commençant à 1)."""
        logger.debug(f"[CatalogService] Recherche catalogue: filters={filters}, sort={sort_option}, page={page}")
        products = self.sort_products(self.filter_products(filters), sort_option)
        total = len(products)
        start = (page - 1) * page_size
        return PaginatedProductResponse(
            items=products[start:start + page_size],
            total=total,
            page=page,
            page_size=page_size,
            total_pages=math.ceil(total / page_size) if page_size else 0,
        )
