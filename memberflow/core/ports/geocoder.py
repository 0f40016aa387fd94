"""
Interface port pour le géocodage des adresses.
"""

from abc import ABC, abstractmethod
from typing import Optional

from memberflow.core.entities.member import Address
from memberflow.core.value_objects.geo import Coordinates


class IGeocoder(ABC):
    """
    Géocodeur d'adresses en texte libre.

    Fonction de meilleur effort : None quand l'adresse n'est pas résolue.
    """

    @abstractmethod
    async def resolve(self, address: Address) -> Optional[Coordinates]:
        """Résout une adresse en coordonnées."""
        ...
