"""
Entités des référentiels consultés par la validation.

Ces entités sont en lecture seule pour le moteur : le catalogue des listes
déroulantes, le catalogue des champs dynamiques et l'annuaire des utilisateurs
sont alimentés par d'autres composants.
"""

from dataclasses import dataclass
from typing import Optional

from memberflow.core.entities.member import UserType
from memberflow.core.value_objects.field_types import FieldType


@dataclass(frozen=True)
class DropdownEntry:
    """
    Entrée du catalogue des listes déroulantes.

    Attributs :
        category : Catégorie (ex: "industries", "country")
        code : Code stocké dans la demande
        label : Libellé affiché
        is_active : Seules les entrées actives sont des choix valides
    """

    category: str
    code: str
    label: str
    is_active: bool = True


@dataclass(frozen=True)
class FieldDefinition:
    """
    Définition d'un champ du formulaire dynamique.

    required vaut True par défaut : seule une définition explicitement
    optionnelle exempte le champ du contrôle de présence.
    """

    key: str
    field_type: FieldType
    label: str = ""
    required: bool = True
    section: str = ""
    membership_types: tuple[str, ...] = ()
    order: int = 0


@dataclass(frozen=True)
class IdentityUser:
    """Utilisateur non supprimé de l'annuaire, tel que vu par le validateur."""

    id: str
    email: str
    user_type: UserType
    member_id: Optional[str] = None
