from decimal import Decimal
from enum import Enum
from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

# Entités du domaine "Catalog"
# Les données viennent de fichiers statiques en camelCase (partNumber, categoryIds...),
# d'où l'alias_generator. Les entités sont immuables une fois chargées.


class CatalogModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )


class StockStatus(str, Enum):
    IN_STOCK = "in-stock"
    ON_REQUEST = "on-request"
    OUT_OF_STOCK = "out-of-stock"


class FixedPrice(CatalogModel):
    type: Literal["fixed"] = "fixed"
    amount: Decimal = Field(..., ge=0, decimal_places=2)
    currency: str = Field("USD", min_length=3, max_length=3)


class OnRequestPrice(CatalogModel):
    # "Price on Request": aucun montant, le vendeur envoie un devis
    type: Literal["on-request"] = "on-request"


Price = Annotated[Union[FixedPrice, OnRequestPrice], Field(discriminator="type")]


class Specification(CatalogModel):
    label: str
    value: str


class ProductDocument(CatalogModel):
    name: str
    url: str


class Category(CatalogModel):
    id: str
    name: str
    slug: str
    description: Optional[str] = None
    subcategories: List["Category"] = []


class Product(CatalogModel):
    id: str
    slug: str
    name: str
    part_number: str
    description: str
    full_description: Optional[str] = None
    category_ids: List[str] = []
    brand: Optional[str] = None
    price: Price
    stock_status: StockStatus
    images: List[str] = []  # La première image est l'image principale
    specifications: Optional[List[Specification]] = None
    compatibility: Optional[List[str]] = None
    documents: Optional[List[ProductDocument]] = None
    featured: bool = False

    @property
    def is_purchasable(self) -> bool:
        """Un produit en rupture ne peut pas être ajouté au panier."""
        return self.stock_status != StockStatus.OUT_OF_STOCK


Category.model_rebuild()
