class CheckoutDomainException(Exception):
    """Exception de base pour le domaine Checkout."""
    def __init__(self, message: str = "Checkout error"):
        self.message = message
        super().__init__(self.message)


class OrderRenderingException(CheckoutDomainException):
    """Levée si le contenu de l'email de commande ne peut pas être généré."""
    def __init__(self, template_name: str, original_exception: Exception):
        self.original_exception = original_exception
        super().__init__(f"Could not render order email template '{template_name}': {original_exception}")
