"""
Couche services applicatifs (cas d'usage).

Les services orchestrent la logique du domaine pour realiser les cas d'usage
du workflow d'adhesion. Ils dependent des ports (interfaces) de core/,
jamais des implementations concretes de adapters/ ou infrastructure/.

Contenu :
- identity_validator : unicite des emails et des domaines Primary
- field_validator : validation des champs dynamiques
- state_machine : transitions de statut (fonctions pures)
- orchestrator : point d'entree des ecritures
- directory : projections en lecture seule
"""
