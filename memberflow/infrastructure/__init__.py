"""
Couche infrastructure : persistance SQL des demandes et des referentiels.
"""
