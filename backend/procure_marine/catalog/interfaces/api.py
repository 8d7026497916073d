import logging
from typing import List, Optional

from fastapi import APIRouter, Path, Query

from procure_marine.core.config import settings
from procure_marine.catalog.application.schemas import (
    PaginatedProductResponse, ProductFilters, ProductSortOption
)
from procure_marine.catalog.domain.entities import Category, Product, StockStatus
from procure_marine.catalog.domain.exceptions import CategoryNotFoundException, ProductNotFoundException
from .dependencies import CatalogServiceDep

logger = logging.getLogger(__name__)

catalog_router = APIRouter(tags=["Catalog"])

# --- Endpoints pour les Catégories ---

@catalog_router.get("/categories", response_model=List[Category])
def list_categories(catalog_service: CatalogServiceDep):
    """Arbre complet des catégories."""
    return catalog_service.list_categories()

@catalog_router.get("/categories/{slug}", response_model=Category)
def get_category(
    catalog_service: CatalogServiceDep,
    slug: str = Path(..., title="Slug de la catégorie"),
):
    category = catalog_service.find_category_by_slug(slug)
    if not category:
        raise CategoryNotFoundException(slug)
    return category

@catalog_router.get("/categories/{slug}/products", response_model=List[Product])
def list_category_products(
    catalog_service: CatalogServiceDep,
    slug: str = Path(..., title="Slug de la catégorie"),
    limit: Optional[int] = Query(None, ge=1),
):
    if not catalog_service.find_category_by_slug(slug):
        raise CategoryNotFoundException(slug)
    return catalog_service.list_products_by_category(slug, limit=limit)

# --- Endpoints pour les Produits ---

@catalog_router.get("/products", response_model=PaginatedProductResponse)
def search_products(
    catalog_service: CatalogServiceDep,
    q: Optional[str] = Query(None, description="Recherche dans nom, référence et description"),
    category: Optional[List[str]] = Query(None, description="IDs de catégories (sous-catégories incluses)"),
    brand: Optional[List[str]] = Query(None),
    stock_status: Optional[List[StockStatus]] = Query(None),
    sort: ProductSortOption = Query(ProductSortOption.NAME_ASC),
    page: int = Query(1, ge=1),
):
    filters = ProductFilters(text=q, category_ids=category, brands=brand, stock_statuses=stock_status)
    logger.info(f"API search_products: filters={filters}, sort={sort.value}, page={page}")
    return catalog_service.search_catalog(
        filters, sort_option=sort, page=page, page_size=settings.PRODUCTS_PAGE_SIZE
    )

@catalog_router.get("/products/featured", response_model=List[Product])
def list_featured_products(
    catalog_service: CatalogServiceDep,
    limit: int = Query(settings.FEATURED_PRODUCTS_LIMIT, ge=1, le=50),
):
    return catalog_service.list_featured_products(limit=limit)

@catalog_router.get("/brands", response_model=List[str])
def list_brands(catalog_service: CatalogServiceDep):
    return catalog_service.list_brands()

@catalog_router.get("/products/{slug}", response_model=Product)
def get_product(
    catalog_service: CatalogServiceDep,
    slug: str = Path(..., title="Slug du produit"),
):
    product = catalog_service.find_product_by_slug(slug)
    if not product:
        raise ProductNotFoundException(slug=slug)
    return product
