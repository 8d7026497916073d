# Standard Library
import asyncio
import uuid
from decimal import Decimal
from typing import AsyncGenerator, Dict, List, Optional

# Third-Party Libraries
import pytest
import pytest_asyncio

from httpx import AsyncClient, ASGITransport

# First-Party Libraries (Your project)
from procure_marine.main import app
from procure_marine.core.config import settings
from procure_marine.cart.application.services import CartStore
from procure_marine.cart.infrastructure.storage import InMemoryKeyValueStorage
from procure_marine.cart.interfaces.dependencies import CartSessionDep, get_cart_storage
from procure_marine.catalog.application.services import CatalogService
from procure_marine.catalog.domain.entities import (
    Category, FixedPrice, OnRequestPrice, Product, StockStatus
)
from procure_marine.catalog.infrastructure.repositories import JsonCatalogRepository, StaticCatalogRepository
from procure_marine.email.domain.exceptions import EmailSendingException
from procure_marine.email.domain.sender import AbstractEmailSender
from procure_marine.email.interfaces.dependencies import get_email_sender
from procure_marine.email.models import EmailMessage, EmailSendResult

# --- Fabriques de données ---

def make_product(
    product_id: str = "prod-a",
    name: Optional[str] = None,
    amount: Optional[str] = "100.00",
    stock_status: StockStatus = StockStatus.IN_STOCK,
    category_ids: Optional[List[str]] = None,
    brand: Optional[str] = "Acme",
    part_number: Optional[str] = None,
    description: str = "Test product",
) -> Product:
    """Crée un produit; `amount=None` donne un prix sur demande."""
    price = FixedPrice(amount=Decimal(amount)) if amount is not None else OnRequestPrice()
    return Product(
        id=product_id,
        slug=product_id,
        name=name or f"Product {product_id}",
        part_number=part_number or f"PN-{product_id.upper()}",
        description=description,
        category_ids=category_ids or ["cat-test"],
        brand=brand,
        price=price,
        stock_status=stock_status,
        images=[f"/images/{product_id}.jpg"],
    )

# --- Fixtures Catalogue ---

@pytest.fixture
def catalog_repository() -> JsonCatalogRepository:
    """Repository chargé depuis les données livrées avec le package."""
    return JsonCatalogRepository(settings.CATALOG_DATA_DIR)

@pytest.fixture
def catalog_service(catalog_repository) -> CatalogService:
    return CatalogService(catalog_repo=catalog_repository)

@pytest.fixture
def small_catalog_service() -> CatalogService:
    """Petit catalogue en mémoire pour les tests de filtre et de tri."""
    categories = [
        Category(
            id="cat-engine",
            name="Engine",
            slug="engine",
            subcategories=[
                Category(id="cat-filters", name="Filters", slug="filters"),
                Category(id="cat-cooling", name="Cooling", slug="cooling"),
            ],
        ),
        Category(id="cat-safety", name="Safety", slug="safety"),
    ]
    products = [
        make_product("p1", name="Zinc Anode", category_ids=["cat-cooling"], brand="Volvo Penta",
                     part_number="ZA-100", stock_status=StockStatus.IN_STOCK),
        make_product("p2", name="Écran de filtre", category_ids=["cat-filters"], brand="Racor",
                     part_number="EF-020", stock_status=StockStatus.OUT_OF_STOCK),
        make_product("p3", name="alternator belt", category_ids=["cat-engine"], brand=None,
                     part_number="AB-300", amount=None, stock_status=StockStatus.ON_REQUEST),
        make_product("p4", name="Life Jacket", category_ids=["cat-safety"], brand="Racor",
                     part_number="LJ-004", description="Offshore impeller-free vest",
                     stock_status=StockStatus.IN_STOCK),
    ]
    return CatalogService(catalog_repo=StaticCatalogRepository(products, categories))

# --- Fixtures Panier ---

@pytest.fixture
def memory_storage() -> InMemoryKeyValueStorage:
    return InMemoryKeyValueStorage()

@pytest.fixture
def cart_store(memory_storage) -> CartStore:
    return CartStore(storage=memory_storage)

# --- Fixtures Email ---

class MockEmailSender(AbstractEmailSender):
    """Sender simulé: enregistre les messages et renvoie un résultat configurable."""

    def __init__(
        self,
        result: Optional[EmailSendResult] = None,
        exception: Optional[Exception] = None,
        delay: float = 0,
    ):
        self.result = result or EmailSendResult(id="mock-message-id")
        self.exception = exception
        self.delay = delay
        self.sent: List[EmailMessage] = []

    async def send_email(self, message: EmailMessage) -> EmailSendResult:
        self.sent.append(message)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.exception:
            raise self.exception
        return self.result

@pytest.fixture
def mock_email_sender() -> MockEmailSender:
    return MockEmailSender()

@pytest.fixture
def failing_email_sender() -> MockEmailSender:
    return MockEmailSender(exception=EmailSendingException("SMTP error: connection refused"))

# --- Fixtures Client HTTP ---

@pytest.fixture
def cart_storages() -> Dict[str, InMemoryKeyValueStorage]:
    """Un stockage mémoire par session panier, partagé entre les requêtes d'un test."""
    return {}

@pytest.fixture
def cart_session_id() -> str:
    return uuid.uuid4().hex

@pytest_asyncio.fixture(scope="function")
async def test_client(
    cart_storages: Dict[str, InMemoryKeyValueStorage],
    cart_session_id: str,
    mock_email_sender: MockEmailSender,
) -> AsyncGenerator[AsyncClient, None]:
    """
    AsyncClient httpx avec stockage panier en mémoire et sender email simulé.

    Le client envoie toujours le même cookie de session panier.
    """
    def override_get_cart_storage(session_id: CartSessionDep) -> InMemoryKeyValueStorage:
        return cart_storages.setdefault(session_id, InMemoryKeyValueStorage())

    def override_get_email_sender() -> AbstractEmailSender:
        return mock_email_sender

    app.dependency_overrides[get_cart_storage] = override_get_cart_storage
    app.dependency_overrides[get_email_sender] = override_get_email_sender

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
        cookies={settings.CART_SESSION_COOKIE: cart_session_id},
    ) as client:
        yield client

    app.dependency_overrides.pop(get_cart_storage, None)
    app.dependency_overrides.pop(get_email_sender, None)
