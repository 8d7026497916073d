import logging
from decimal import Decimal
from pathlib import Path
from typing import List

from dotenv import load_dotenv
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

# Charger le .env AVANT de définir la classe Settings
load_dotenv()

PACKAGE_DIR = Path(__file__).resolve().parent.parent


class Settings(BaseSettings):
    # --- Application ---
    APP_NAME: str = "Procure Marine API"
    API_V1_PREFIX: str = "/api/v1"
    LOG_LEVEL: str = "INFO"
    CORS_ORIGINS: List[str] = [
        "https://procuremarine.com",
        "http://localhost:3000",
    ]

    # --- Catalogue ---
    CATALOG_DATA_DIR: Path = PACKAGE_DIR / "catalog" / "data"
    PRODUCTS_PAGE_SIZE: int = 12
    FEATURED_PRODUCTS_LIMIT: int = 6

    # --- Panier ---
    CART_STORAGE_DIR: Path = Path("var") / "carts"
    CART_STORAGE_KEY: str = "procure-marine-cart"
    CART_SESSION_COOKIE: str = "cart_session"

    # --- Commande ---
    ORDER_NOTIFICATION_EMAIL: str = "sales@procuremarine.com"
    ORDER_REFERENCE_PREFIX: str = "PM"
    DISPATCH_TIMEOUT_SECONDS: float = 15.0

    # --- Affichage des prix ---
    DEFAULT_CURRENCY: str = "USD"
    DISPLAY_CURRENCY: str = "AED"
    USD_TO_AED_RATE: Decimal = Decimal("3.67")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",  # Ignorer les variables d'env non définies dans le modèle
    )

    @property
    def exchange_rates(self) -> dict:
        """Taux de conversion pour l'affichage, indexés par (devise source, devise cible)."""
        return {("USD", "AED"): self.USD_TO_AED_RATE}


settings = Settings()

logger.debug(f"[Settings] Catalogue: {settings.CATALOG_DATA_DIR}, paniers: {settings.CART_STORAGE_DIR}")
