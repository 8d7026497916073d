import pytest

from procure_marine.catalog.application.schemas import ProductFilters, ProductSortOption
from procure_marine.catalog.domain.entities import StockStatus

# --- Catégories ---

def test_resolve_top_level_category_includes_direct_subcategories(small_catalog_service):
    ids = small_catalog_service.resolve_category_and_descendant_ids("cat-engine")
    assert ids == {"cat-engine", "cat-filters", "cat-cooling"}

def test_resolve_subcategory_returns_only_itself(small_catalog_service):
    assert small_catalog_service.resolve_category_and_descendant_ids("cat-filters") == {"cat-filters"}

def test_resolve_unknown_category_returns_only_itself(small_catalog_service):
    assert small_catalog_service.resolve_category_and_descendant_ids("cat-unknown") == {"cat-unknown"}

def test_find_category_by_slug_searches_subcategories(small_catalog_service):
    assert small_catalog_service.find_category_by_slug("engine").id == "cat-engine"
    assert small_catalog_service.find_category_by_slug("cooling").id == "cat-cooling"
    assert small_catalog_service.find_category_by_slug("nope") is None

# --- Recherche de produits ---

def test_find_product_by_slug_and_id(small_catalog_service):
    assert small_catalog_service.find_product_by_slug("p1").name == "Zinc Anode"
    assert small_catalog_service.find_product_by_id("p4").name == "Life Jacket"
    assert small_catalog_service.find_product_by_slug("missing") is None
    assert small_catalog_service.find_product_by_id("missing") is None

def test_filter_by_parent_category_includes_subcategory_products(small_catalog_service):
    """Un produit d'une sous-catégorie apparaît sous le filtre de la catégorie parente."""
    result = small_catalog_service.filter_products(ProductFilters(category_ids=["cat-engine"]))
    assert {p.id for p in result} == {"p1", "p2", "p3"}

def test_filter_by_subcategory_excludes_siblings(small_catalog_service):
    result = small_catalog_service.filter_products(ProductFilters(category_ids=["cat-filters"]))
    assert [p.id for p in result] == ["p2"]

def test_text_filter_matches_name_part_number_and_description(small_catalog_service):
    by_name = small_catalog_service.filter_products(ProductFilters(text="  ZINC "))
    by_part = small_catalog_service.filter_products(ProductFilters(text="ab-300"))
    by_description = small_catalog_service.filter_products(ProductFilters(text="impeller"))
    assert [p.id for p in by_name] == ["p1"]
    assert [p.id for p in by_part] == ["p3"]
    assert [p.id for p in by_description] == ["p4"]

def test_brand_filter_never_matches_products_without_brand(small_catalog_service):
    result = small_catalog_service.filter_products(ProductFilters(brands=["Racor", "Volvo Penta"]))
    assert {p.id for p in result} == {"p1", "p2", "p4"}

def test_filters_combine_with_and(small_catalog_service):
    filters = ProductFilters(brands=["Racor"], stock_statuses=[StockStatus.IN_STOCK])
    result = small_catalog_service.filter_products(filters)
    assert [p.id for p in result] == ["p4"]

def test_empty_filters_return_every_product(small_catalog_service):
    everything = small_catalog_service.filter_products(ProductFilters())
    also_everything = small_catalog_service.filter_products(
        ProductFilters(text="   ", category_ids=[], brands=[], stock_statuses=[])
    )
    assert len(everything) == 4
    assert [p.id for p in also_everything] == [p.id for p in everything]

# --- Tri ---

def test_sort_by_name_ignores_case_and_accents(small_catalog_service):
    products = small_catalog_service.list_products()
    result = small_catalog_service.sort_products(products, ProductSortOption.NAME_ASC)
    assert [p.name for p in result] == ["alternator belt", "Écran de filtre", "Life Jacket", "Zinc Anode"]

def test_sort_by_name_desc(small_catalog_service):
    products = small_catalog_service.list_products()
    result = small_catalog_service.sort_products(products, ProductSortOption.NAME_DESC)
    assert [p.id for p in result] == ["p1", "p4", "p2", "p3"]

def test_sort_by_part_number(small_catalog_service):
    products = small_catalog_service.list_products()
    result = small_catalog_service.sort_products(products, ProductSortOption.PART_NUMBER)
    assert [p.part_number for p in result] == ["AB-300", "EF-020", "LJ-004", "ZA-100"]

def test_sort_by_availability_is_stable(small_catalog_service):
    products = small_catalog_service.list_products()
    result = small_catalog_service.sort_products(products, ProductSortOption.AVAILABILITY)
    # p1 et p4 sont en stock et gardent leur ordre relatif
    assert [p.id for p in result] == ["p1", "p4", "p3", "p2"]

def test_sort_does_not_mutate_input(small_catalog_service):
    products = small_catalog_service.list_products()
    before = list(products)
    result = small_catalog_service.sort_products(products, ProductSortOption.NAME_DESC)
    assert products == before
    assert result is not products

def test_filter_then_sort_is_repeatable(small_catalog_service):
    filters = ProductFilters(category_ids=["cat-engine"])
    first = small_catalog_service.sort_products(small_catalog_service.filter_products(filters), ProductSortOption.NAME_ASC)
    second = small_catalog_service.sort_products(small_catalog_service.filter_products(filters), ProductSortOption.NAME_ASC)
    assert [p.id for p in first] == [p.id for p in second]

# --- Catalogue livré ---

def test_featured_products_respect_limit(catalog_service):
    featured = catalog_service.list_featured_products()
    assert [p.id for p in featured] == ["prod-001", "prod-003", "prod-005", "prod-008"]
    assert len(catalog_service.list_featured_products(limit=2)) == 2

def test_list_brands_is_unique_and_sorted(catalog_service):
    brands = catalog_service.list_brands()
    assert brands == sorted(set(brands), key=str.casefold)
    assert "Racor" in brands
    assert None not in brands

def test_list_products_by_category_slug(catalog_service):
    category = catalog_service.list_categories()[0]
    products = catalog_service.list_products_by_category(category.slug)
    assert products
    expected_ids = catalog_service.resolve_category_and_descendant_ids(category.id)
    assert all(expected_ids.intersection(p.category_ids) for p in products)
    assert catalog_service.list_products_by_category("does-not-exist") == []
    assert len(catalog_service.list_products_by_category(category.slug, limit=1)) == 1

@pytest.mark.parametrize("page, expected_count", [(1, 5), (2, 5), (3, 1), (4, 0)])
def test_search_catalog_paginates(catalog_service, page, expected_count):
    response = catalog_service.search_catalog(ProductFilters(), ProductSortOption.NAME_ASC, page=page, page_size=5)
    assert response.total == 11
    assert response.total_pages == 3
    assert len(response.items) == expected_count
