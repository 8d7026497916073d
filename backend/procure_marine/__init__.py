"""
Procure Marine - catalogue, panier et demandes de commande par email.
"""
