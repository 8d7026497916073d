import asyncio
import logging
import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from email.utils import formatdate, make_msgid, parseaddr
from typing import Optional

from procure_marine.email import config
from procure_marine.email.config import EmailSettings
from procure_marine.email.domain.exceptions import EmailConfigurationException, EmailSendingException
from procure_marine.email.domain.sender import AbstractEmailSender
from procure_marine.email.models import EmailMessage, EmailSendResult

logger = logging.getLogger(__name__)

class SmtpEmailSender(AbstractEmailSender):
    """Implémentation de l'envoi d'email via SMTP standard.

    smtplib est bloquant: l'envoi est exécuté dans un thread (`asyncio.to_thread`)
    pour ne pas bloquer la boucle d'événements de FastAPI.
    """

    def __init__(self, email_settings: Optional[EmailSettings] = None):
        self.settings = email_settings or config.settings

        if not self.settings.SMTP_HOST or not self.settings.SMTP_PORT:
            logger.error("[SmtpEmailSender] Configuration SMTP incomplète.")
            raise EmailConfigurationException("SMTP configuration (host, port) is incomplete.")
        if bool(self.settings.SMTP_USER) != bool(self.settings.SMTP_PASSWORD):
            logger.error("[SmtpEmailSender] Identifiants SMTP partiels (user sans mot de passe ou inverse).")
            raise EmailConfigurationException("SMTP credentials must define both user and password.")

        logger.info(f"[SmtpEmailSender] Initialisé pour {self.settings.SMTP_HOST}:{self.settings.SMTP_PORT}")

    def _build_mime(self, message: EmailMessage, message_id: str) -> MIMEMultipart:
        msg = MIMEMultipart("alternative")
        msg["From"] = message.sender
        msg["To"] = ", ".join(message.to)
        msg["Subject"] = message.subject
        msg["Date"] = formatdate(localtime=False)
        msg["Message-ID"] = message_id
        if message.reply_to:
            msg["Reply-To"] = message.reply_to
        msg.attach(MIMEText(message.html_body, "html", "utf-8"))
        return msg

    def _deliver(self, message: EmailMessage) -> EmailSendResult:
        """Envoi synchrone; exécuté hors de la boucle d'événements."""
        _, envelope_sender = parseaddr(message.sender)
        domain = envelope_sender.split("@")[-1] if "@" in envelope_sender else None
        message_id = make_msgid(domain=domain)
        mime = self._build_mime(message, message_id)

        try:
            logger.debug(f"[SmtpEmailSender] Connexion à {self.settings.SMTP_HOST}:{self.settings.SMTP_PORT}")
            with smtplib.SMTP(
                self.settings.SMTP_HOST,
                self.settings.SMTP_PORT,
                timeout=self.settings.TIMEOUT_SECONDS,
            ) as server:
                if self.settings.USE_TLS:
                    server.starttls()
                if self.settings.SMTP_USER:
                    logger.debug(f"[SmtpEmailSender] Authentification avec {self.settings.SMTP_USER}")
                    server.login(self.settings.SMTP_USER, self.settings.SMTP_PASSWORD)

                logger.info(f"[SmtpEmailSender] Envoi de l'email à {message.to} (Sujet: {message.subject})")
                server.sendmail(envelope_sender or message.sender, list(message.to), mime.as_string())

            logger.info(f"[SmtpEmailSender] Email envoyé avec succès, Message-ID {message_id}")
            return EmailSendResult(id=message_id)

        except smtplib.SMTPRecipientsRefused as e:
            # Refus du fournisseur: on renvoie une erreur au lieu de lever
            logger.error(f"[SmtpEmailSender] Destinataire(s) refusé(s): {e.recipients}")
            return EmailSendResult(error=f"Recipients refused: {', '.join(e.recipients)}")
        except smtplib.SMTPAuthenticationError as e:
            logger.error(f"[SmtpEmailSender] Échec authentification SMTP: {e}", exc_info=True)
            raise EmailSendingException("SMTP authentication failed.", original_exception=e)
        except smtplib.SMTPSenderRefused as e:
            logger.error(f"[SmtpEmailSender] Expéditeur refusé: {e.sender}", exc_info=True)
            raise EmailSendingException(f"Sender refused by server: {e.sender}", original_exception=e)
        except smtplib.SMTPException as e:
            logger.error(f"[SmtpEmailSender] Erreur SMTP générale: {e}", exc_info=True)
            raise EmailSendingException(f"SMTP error: {e}", original_exception=e)
        except OSError as e:
            logger.error(f"[SmtpEmailSender] Erreur réseau vers {self.settings.SMTP_HOST}: {e}", exc_info=True)
            raise EmailSendingException(f"Network error: {e}", original_exception=e)

    async def send_email(self, message: EmailMessage) -> EmailSendResult:
        return await asyncio.to_thread(self._deliver, message)
