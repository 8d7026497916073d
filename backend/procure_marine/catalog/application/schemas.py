from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from ..domain.entities import Product, StockStatus

# Schémas Pydantic pour la couche Application / API du catalogue


class ProductSortOption(str, Enum):
    NAME_ASC = "name-asc"
    NAME_DESC = "name-desc"
    PART_NUMBER = "part-number"
    AVAILABILITY = "availability"


class ProductFilters(BaseModel):
    """Critères de filtrage; un critère absent ou vide n'impose aucune contrainte."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    text: Optional[str] = None
    category_ids: Optional[List[str]] = None
    brands: Optional[List[str]] = None
    stock_statuses: Optional[List[StockStatus]] = None


# Pour les listes paginées
class PaginatedProductResponse(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    items: List[Product]
    total: int
    page: int = Field(..., ge=1)
    page_size: int
    total_pages: int
