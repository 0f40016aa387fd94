"""
Projections en lecture seule de l'annuaire des membres.

DirectoryService expose les vues publiques calculees a partir des membres
actifs : secteurs d'activite, membres mis en avant, partenaires et sponsors,
donnees de la carte (agregats par continent et par pays).
"""

from dataclasses import dataclass, field
from typing import Optional

from memberflow.core.entities.member import Member, MemberCategory
from memberflow.core.ports.repositories import IMemberRepository
from memberflow.utils.helpers import continent_for_country


VIEW_MEMBER_ACTION = "view-member"
UNKNOWN_COUNTRY = "Unknown"


@dataclass(frozen=True)
class FeaturedMemberView:
    """Membre mis en avant (vue reduite)."""

    id: str
    member_code: str
    name: str
    logo_url: Optional[str]
    industries: tuple[str, ...]


@dataclass(frozen=True)
class DirectoryEntry:
    """Membre actif tel qu'affiche dans l'annuaire public."""

    id: str
    name: str
    category: str
    logo_url: Optional[str]
    website_url: Optional[str]
    industries: tuple[str, ...]
    country: Optional[str]


@dataclass
class PartnersAndSponsors:
    """Partenaires (strategicMembers) et sponsors (partnerAndObserver)."""

    partners: list[DirectoryEntry] = field(default_factory=list)
    sponsors: list[DirectoryEntry] = field(default_factory=list)


@dataclass(frozen=True)
class CountryCount:
    """Nombre de membres d'un pays, avec les premieres coordonnees connues."""

    country: str
    count: int
    latitude: Optional[float] = None
    longitude: Optional[float] = None


@dataclass(frozen=True)
class MemberMapPoint:
    """Position d'un membre sur la carte."""

    id: str
    company_name: str
    latitude: float
    longitude: float
    country: Optional[str]
    country_code: Optional[str]
    city: Optional[str]
    logo_url: Optional[str]
    industries: tuple[str, ...]
    category: str
    type_of_organization: Optional[str]
    website_url: Optional[str]


@dataclass
class MapData:
    """
    Donnees de la carte des membres.

    members et les totaux ne sont renseignes que pour l'action "view-member".
    """

    continent_member_count: dict[str, int] = field(default_factory=dict)
    country_member_count: list[CountryCount] = field(default_factory=list)
    members: Optional[list[MemberMapPoint]] = None
    total_members: Optional[int] = None
    members_with_coordinates: Optional[int] = None


def _to_entry(member: Member) -> DirectoryEntry:
    org = member.organisation_info
    return DirectoryEntry(
        id=member.member_id or "",
        name=org.company_name,
        category=member.category.value,
        logo_url=org.member_logo_url,
        website_url=org.website_url,
        industries=tuple(org.industries),
        country=org.address.country if org.address else None,
    )


def _has_coordinates(member: Member) -> bool:
    address = member.organisation_info.address
    return address is not None and address.has_coordinates


def build_aggregates(members: list[Member]) -> MapData:
    """
    Agrege les membres par continent et par pays.

    Les pays sont tries par nombre de membres decroissant ; chaque pays porte
    les coordonnees du premier membre rencontre.
    """
    continents: dict[str, int] = {}
    countries: dict[str, dict] = {}

    for member in members:
        address = member.organisation_info.address
        raw_country = address.country if address else None
        country = raw_country.strip() if raw_country and raw_country.strip() else UNKNOWN_COUNTRY

        data = countries.setdefault(country, {"count": 0, "latitude": None, "longitude": None})
        data["count"] += 1
        if data["latitude"] is None and address is not None and address.has_coordinates:
            data["latitude"] = address.latitude
            data["longitude"] = address.longitude

        continent = continent_for_country(country)
        continents[continent] = continents.get(continent, 0) + 1

    country_counts = sorted(
        (CountryCount(country=name, **data) for name, data in countries.items()),
        key=lambda c: c.count,
        reverse=True,
    )
    return MapData(continent_member_count=continents, country_member_count=country_counts)


class DirectoryService:
    """
    Service des projections publiques de l'annuaire.

    Example:
        directory = DirectoryService(member_repository)
        featured = await directory.list_featured()
        data = await directory.map_data("view-member")
    """

    def __init__(self, member_repository: IMemberRepository) -> None:
        self._repo = member_repository

    async def list_industries(self) -> list[str]:
        """Codes des secteurs utilises par au moins une demande, tries."""
        members = await self._repo.list_all()
        return sorted({code for m in members for code in m.organisation_info.industries})

    async def list_by_industry(self, industry: str) -> list[DirectoryEntry]:
        """Membres actifs portant ce secteur d'activite."""
        members = await self._repo.list_active()
        return [_to_entry(m) for m in members if industry in m.organisation_info.industries]

    async def list_featured(self) -> list[FeaturedMemberView]:
        """Membres actifs mis en avant."""
        members = await self._repo.list_active()
        return [
            FeaturedMemberView(
                id=m.member_id or "",
                member_code=m.member_id or "",
                name=m.organisation_info.company_name,
                logo_url=m.organisation_info.member_logo_url,
                industries=tuple(m.organisation_info.industries),
            )
            for m in members
            if m.featured_member
        ]

    async def list_partners_and_sponsors(self) -> PartnersAndSponsors:
        """Partenaires (strategicMembers) et sponsors (partnerAndObserver) actifs."""
        result = PartnersAndSponsors()
        for member in await self._repo.list_active():
            if member.category == MemberCategory.STRATEGIC:
                result.partners.append(_to_entry(member))
            elif member.category == MemberCategory.PARTNER_AND_OBSERVER:
                result.sponsors.append(_to_entry(member))
        return result

    async def map_data(self, action: str) -> MapData:
        """
        Donnees de la carte des membres actifs geolocalises.

        Args:
            action: "view-member" pour les positions individuelles et les
                    agregats, toute autre valeur ("view-map") pour les agregats seuls
        """
        members = await self._repo.list_active()
        located = [m for m in members if _has_coordinates(m)]
        data = build_aggregates(located)

        if action == VIEW_MEMBER_ACTION:
            data.members = [self._to_point(m) for m in located]
            data.total_members = len(members)
            data.members_with_coordinates = len(located)
        return data

    @staticmethod
    def _to_point(member: Member) -> MemberMapPoint:
        org = member.organisation_info
        address = org.address
        return MemberMapPoint(
            id=member.member_id or "",
            company_name=org.company_name,
            latitude=address.latitude,
            longitude=address.longitude,
            country=address.country,
            country_code=address.country_code,
            city=address.city,
            logo_url=org.member_logo_url,
            industries=tuple(org.industries),
            category=member.category.value,
            type_of_organization=org.type_of_organization,
            website_url=org.website_url,
        )
