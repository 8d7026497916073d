from typing import Annotated

from fastapi import Depends

from procure_marine.email.domain.sender import AbstractEmailSender
from procure_marine.email.infrastructure.smtp_sender import SmtpEmailSender

# --- Email Sender Dependency ---

def get_email_sender() -> AbstractEmailSender:
    """Fournit une instance de l'implémentation concrète de l'Email Sender.

    SmtpEmailSender lit sa configuration depuis les variables EMAIL_* et lève
    EmailConfigurationException si elle est incomplète.
    """
    return SmtpEmailSender()

EmailSenderDep = Annotated[AbstractEmailSender, Depends(get_email_sender)]
