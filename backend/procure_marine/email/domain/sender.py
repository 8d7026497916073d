from abc import ABC, abstractmethod

from procure_marine.email.models import EmailMessage, EmailSendResult


class AbstractEmailSender(ABC):
    """Interface abstraite pour un service d'envoi d'e-mails."""

    @abstractmethod
    async def send_email(self, message: EmailMessage) -> EmailSendResult:
        """Envoie un email.

        Args:
            message: Message complet (expéditeur, destinataires, sujet, HTML, reply-to).

        Returns:
            EmailSendResult avec l'identifiant du message si l'envoi a été accepté,
            ou une erreur si le fournisseur l'a refusé.

        Raises:
            EmailSendingException: Si une erreur majeure empêche l'envoi.
        """
        raise NotImplementedError
