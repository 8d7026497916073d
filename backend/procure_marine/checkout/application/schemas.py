from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from ..domain.entities import ContactInfo, DeliveryInfo

# Schémas d'entrée de l'API checkout.
# Les champs texte ont une valeur par défaut vide: un champ manquant est signalé
# par la validation du formulaire (erreurs par champ), pas par un 422 FastAPI générique.


class CheckoutPayload(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ContactPayload(CheckoutPayload):
    full_name: str = ""
    email: str = ""
    phone: str = ""
    company_name: Optional[str] = None

    def to_domain(self) -> ContactInfo:
        return ContactInfo(
            full_name=self.full_name,
            email=self.email,
            phone=self.phone,
            company_name=self.company_name,
        )


class DeliveryPayload(CheckoutPayload):
    location: str = ""
    notes: Optional[str] = None

    def to_domain(self) -> DeliveryInfo:
        return DeliveryInfo(location=self.location, notes=self.notes)


class CheckoutRequest(CheckoutPayload):
    contact: ContactPayload = Field(default_factory=ContactPayload)
    delivery: DeliveryPayload = Field(default_factory=DeliveryPayload)
    additional_notes: Optional[str] = None
