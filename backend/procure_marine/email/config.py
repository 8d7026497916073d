from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

class EmailSettings(BaseSettings):
    """Configuration du module email.

    Les paramètres sont chargés depuis les variables d'environnement avec le préfixe EMAIL_.
    """
    SMTP_HOST: str = ""
    SMTP_PORT: int = 587
    SMTP_USER: Optional[str] = None
    SMTP_PASSWORD: Optional[str] = None
    USE_TLS: bool = True
    FROM_ADDRESS: str = "orders@procuremarine.com"
    FROM_NAME: str = "Procure Marine Orders"
    TIMEOUT_SECONDS: float = 10.0

    model_config = SettingsConfigDict(env_prefix="EMAIL_", env_file=".env", case_sensitive=True, extra="ignore")

    @property
    def formatted_sender(self) -> str:
        return f"{self.FROM_NAME} <{self.FROM_ADDRESS}>"

# Instance globale des paramètres
settings = EmailSettings()
