"""Exceptions du collaborateur email (envoi des demandes de commande)."""

from typing import Optional


class EmailDomainException(Exception):
    """Base des erreurs d'envoi; le pipeline de commande les traite comme un échec d'envoi."""
    def __init__(self, message: str):
        self.message = message
        super().__init__(self.message)


class EmailSendingException(EmailDomainException):
    """Le fournisseur n'a pas pu prendre le message en charge (réseau, SMTP, authentification)."""
    def __init__(self, message: str, original_exception: Optional[Exception] = None):
        detail = f"Email sending failed: {message}"
        if original_exception is not None:
            detail = f"{detail} ({type(original_exception).__name__}: {original_exception})"
        super().__init__(detail)
        self.original_exception = original_exception


class EmailConfigurationException(EmailDomainException):
    """Paramètres EMAIL_* absents ou incohérents; levée à la construction du sender."""
    pass
