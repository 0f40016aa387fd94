"""
Memberflow - Moteur de workflow des demandes d'adhesion.

Ce package gere le cycle de vie des demandes d'adhesion des organisations :
validation des formulaires dynamiques, unicite des identites, machine a etats
des approbations (comite puis conseil) et projections en lecture seule.

Architecture : Hexagonale (Ports et Adaptateurs)
- core/ : Couche domaine (entités, ports, objets valeur, erreurs)
- services/ : Couche application (validateurs, machine a etats, orchestrateur)
- adapters/ : Clients externes (géocodage) et CLI
- infrastructure/ : Persistance SQLModel
"""

__version__ = "0.1.0"
