"""
Objets valeur geographiques.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class Coordinates:
    """
    Coordonnees GPS retournees par le geocodeur.

    Attributs:
        latitude: Latitude en degres decimaux
        longitude: Longitude en degres decimaux
    """

    latitude: float
    longitude: float

    @property
    def is_set(self) -> bool:
        """Les coordonnees (0, 0) sont traitees comme absentes."""
        return self.latitude != 0 and self.longitude != 0
