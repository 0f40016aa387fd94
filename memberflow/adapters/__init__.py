"""
Couche adaptateurs.

Les adaptateurs implementent les ports definis dans core/ports/ et fournissent
des implementations concretes pour les systemes externes.

Sous-packages :
- cli/ : Interface ligne de commande (Typer)
- api/ : Clients des services HTTP externes (geocodage)

Chaque adaptateur depend de core/ mais core/ ne depend jamais des adaptateurs.
"""
