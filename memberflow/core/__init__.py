"""
Couche domaine (core).

Contient les entités métier, ports (interfaces abstraites), objets valeur et
la taxonomie des erreurs. Cette couche n'a AUCUNE dépendance vers
l'infrastructure (adapters, frameworks, BDD).

Sous-packages :
- entities/ : Demande d'adhésion, snapshots utilisateurs, référentiels
- ports/ : Interfaces abstraites définissant les contrats pour les adaptateurs
- value_objects/ : Types de champs dynamiques, coordonnées
"""
