"""
Modèles du module email.

`EmailMessage` est le message transmis au sender; `EmailSendResult` est sa réponse:
un identifiant en cas de succès, ou une erreur (sans lever d'exception).
"""
from typing import List, Optional

from pydantic import BaseModel, Field


class EmailMessage(BaseModel):
    """Message HTML prêt à être envoyé."""
    sender: str = Field(..., description="Expéditeur, ex: 'Procure Marine Orders <orders@procuremarine.com>'")
    to: List[str] = Field(..., min_length=1, description="Destinataires")
    subject: str = Field(..., description="Sujet de l'email")
    html_body: str = Field(..., description="Contenu HTML de l'email")
    reply_to: Optional[str] = Field(None, description="Adresse de réponse (ex: le client)")


class EmailSendResult(BaseModel):
    """Résultat d'un envoi: `id` si accepté, `error` sinon."""
    id: Optional[str] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.id is not None and self.error is None
