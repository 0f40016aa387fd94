"""
Orchestrateur du workflow des demandes d'adhesion.

WorkflowOrchestrator est le seul point d'entree des ecritures :
- creation d'une demande (validation des champs, unicite, geocodage, persistance)
- transitions de statut (machine a etats + ecriture conditionnelle)
- mises a jour de profil et des utilisateurs associes

Chaque operation est sans etat : les catalogues sont relus a chaque appel.
"""

from dataclasses import dataclass, replace
from datetime import datetime, timezone
from typing import Any, Callable, Mapping, Optional, Sequence

from loguru import logger

from memberflow.core.entities.member import (
    CONSENT_FIELD_KEYS,
    ApprovalStage,
    Member,
    MemberCategory,
    MemberConsent,
    MemberStatus,
    MemberUser,
    OrganisationInfo,
    UserSnapshot,
    WorkflowAction,
)
from memberflow.core.errors import (
    FieldError,
    FieldErrorKind,
    FieldValidationError,
    MemberflowError,
    NotFoundError,
    ProfileLockedError,
)
from memberflow.core.ports.catalogs import IFieldSchemaCatalog
from memberflow.core.ports.geocoder import IGeocoder
from memberflow.core.ports.repositories import IMemberRepository
from memberflow.services.field_validator import EMAIL_PATTERN, DynamicFieldValidator
from memberflow.services.identity_validator import IdentityUniquenessValidator
from memberflow.services.state_machine import apply_transition
from memberflow.utils.constants import CREATE_SECTIONS, PROFILE_SECTIONS
from memberflow.utils.helpers import country_to_alpha2


# Statuts dans lesquels un brouillon peut etre enregistre
DRAFT_EDITABLE_STATUSES = frozenset({
    MemberStatus.DRAFT,
    MemberStatus.PENDING_FORM_SUBMISSION,
    MemberStatus.REJECTED,
})

# Cles hors catalogue acceptees par update_application_profile
CATEGORY_KEY = "category"
FEATURED_KEY = "featuredMember"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class SearchPage:
    """Page de resultats de recherche."""

    items: list[Member]
    total: int
    page: int
    page_size: int

    @property
    def pages(self) -> int:
        """Nombre total de pages."""
        if self.page_size <= 0:
            return 0
        return (self.total + self.page_size - 1) // self.page_size


def check_member_users(users: Sequence[MemberUser]) -> dict[str, FieldError]:
    """
    Controle le format des emails et la regle de l'utilisateur de correspondance.

    Returns:
        Les erreurs par cle ("memberUsers" ou "memberUsers[i].email")
    """
    errors: dict[str, FieldError] = {}
    if not users:
        errors["memberUsers"] = FieldError(
            FieldErrorKind.REQUIRED, "At least one user is required"
        )
        return errors

    for index, user in enumerate(users):
        if not EMAIL_PATTERN.match((user.email or "").strip()):
            errors[f"memberUsers[{index}].email"] = FieldError(
                FieldErrorKind.INVALID_FORMAT, "Email must be a valid email address"
            )

    if sum(1 for user in users if user.correspondance_user) > 1:
        errors["memberUsers"] = FieldError(
            FieldErrorKind.BUSINESS_RULE, "Only one correspondence user is allowed"
        )
    return errors


class WorkflowOrchestrator:
    """
    Service d'orchestration des demandes d'adhesion.

    Example:
        orchestrator = WorkflowOrchestrator(
            member_repository=repo,
            field_schema_catalog=schema_catalog,
            field_validator=DynamicFieldValidator(dropdown_catalog),
            identity_validator=IdentityUniquenessValidator(identity_store),
            geocoder=geocoder,
        )
        member = await orchestrator.create_application(org, users, consent, "votingMember")
        member = await orchestrator.update_application_status(
            member.member_id, "submit", None, actor_id="user-1"
        )
    """

    def __init__(
        self,
        member_repository: IMemberRepository,
        field_schema_catalog: IFieldSchemaCatalog,
        field_validator: DynamicFieldValidator,
        identity_validator: IdentityUniquenessValidator,
        geocoder: Optional[IGeocoder] = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._repo = member_repository
        self._schema_catalog = field_schema_catalog
        self._field_validator = field_validator
        self._identity_validator = identity_validator
        self._geocoder = geocoder
        self._clock = clock

    # ------------------------------------------------------------------
    # Creation
    # ------------------------------------------------------------------

    async def create_application(
        self,
        organisation_info: OrganisationInfo,
        member_users: Sequence[MemberUser],
        consent: MemberConsent,
        category: MemberCategory | str,
        draft: bool = False,
    ) -> Member:
        """
        Cree une demande d'adhesion.

        Args:
            organisation_info: Profil de l'organisation
            member_users: Utilisateurs a associer (au moins un)
            consent: Consentements juridiques
            category: Categorie d'adhesion
            draft: True pour creer un brouillon (champs obligatoires non exiges)

        Returns:
            La demande persistee (pendingFormSubmission ou draft)

        Raises:
            FieldValidationError: Champs invalides (rien n'est persiste)
            DuplicateEmailError / DuplicatePrimaryDomainError: Conflit d'identite
            ExternalLookupError: Catalogue, annuaire ou depot indisponible
        """
        category = self._parse_category(category)
        schema = await self._schema_catalog.list_fields(category.value, CREATE_SECTIONS)

        values = organisation_info.to_field_values()
        values.update(consent.to_field_values())
        result = await self._field_validator.validate(
            schema, values, enforce_required=not draft
        )

        errors = dict(result.errors)
        errors.update(check_member_users(member_users))
        if errors:
            raise FieldValidationError(errors)

        await self._identity_validator.validate(member_users)

        organisation_info = self._with_country_code(
            organisation_info.with_field_values(result.cleaned)
        )
        organisation_info = await self._geocode(organisation_info)

        now = self._clock()
        member = Member(
            category=category,
            organisation_info=organisation_info,
            status=MemberStatus.DRAFT if draft else MemberStatus.PENDING_FORM_SUBMISSION,
            user_snapshots=[UserSnapshot.from_member_user(u, now) for u in member_users],
            member_consent=consent,
            created_at=now,
            updated_at=now,
        )
        saved = await self._repo.add(member)

        logger.bind(
            member_id=saved.member_id,
            application_number=saved.application_number,
            category=category.value,
        ).info(f"Demande creee: {saved.member_id} ({saved.status.value})")
        return saved

    # ------------------------------------------------------------------
    # Transitions de statut
    # ------------------------------------------------------------------

    async def update_application_status(
        self,
        member_id: str,
        action: WorkflowAction | str,
        stage: Optional[ApprovalStage | str],
        actor_id: str,
        comment: Optional[str] = None,
    ) -> Member:
        """
        Applique une action du workflow a une demande.

        La soumission revalide la demande stockee contre le schema courant.
        L'ecriture est conditionnee au statut lu : si un autre acteur a
        modifie la demande entre-temps, ConcurrentModificationError est levee.

        Raises:
            NotFoundError: Demande inconnue ou retiree
            InvalidTransitionError: Action non permise depuis le statut courant
            FieldValidationError: Rejet sans commentaire, ou demande incomplete a la soumission
            ConcurrentModificationError: Conflit d'ecriture (relire puis rejouer)
        """
        now = self._clock()
        audit = {
            "actor_id": actor_id,
            "member_id": member_id,
            "action": getattr(action, "value", action),
            "stage": getattr(stage, "value", stage),
            "timestamp": now.isoformat(),
        }

        try:
            member = await self._require(member_id)
            audit["from_status"] = member.status.value

            if action == WorkflowAction.SUBMIT:
                await self._revalidate_for_submission(member)

            outcome = apply_transition(member, action, stage, actor_id, comment, now)
            saved = await self._repo.update_status(outcome.member, member.status, outcome.entry)
        except MemberflowError as error:
            logger.bind(error=type(error).__name__, **audit).warning(
                f"Transition refusee pour {member_id}: {type(error).__name__}"
            )
            raise

        logger.bind(to_status=saved.status.value, **audit).info(
            f"Transition {member_id}: {member.status.value} -> {saved.status.value}"
        )
        return saved

    async def _revalidate_for_submission(self, member: Member) -> None:
        """Controle complet de la demande stockee avant passage en comite."""
        schema = await self._schema_catalog.list_fields(member.category.value, CREATE_SECTIONS)
        result = await self._field_validator.validate(schema, member.field_values())

        errors = dict(result.errors)
        errors.update(check_member_users([s.to_member_user() for s in member.user_snapshots]))
        if errors:
            raise FieldValidationError(errors)

    # ------------------------------------------------------------------
    # Profil
    # ------------------------------------------------------------------

    async def update_application_profile(
        self,
        member_id: str,
        fields: Mapping[str, Any],
        member_users: Optional[Sequence[MemberUser]] = None,
        admin_override: bool = False,
    ) -> Member:
        """
        Met a jour partiellement le profil d'une demande.

        Seules les cles fournies sont validees. Le statut n'est jamais modifie.

        Args:
            member_id: Identifiant de la demande
            fields: Valeurs par cle de champ (plus "category" et "featuredMember")
            member_users: Nouvelle liste complete d'utilisateurs (optionnel)
            admin_override: Autorise la modification d'une demande approuvee

        Raises:
            ProfileLockedError: Demande approuvee sans derogation, categorie
                d'un membre actif, ou consentements apres creation
            FieldValidationError: Valeurs invalides
            DuplicateEmailError / DuplicatePrimaryDomainError: Conflit d'identite
        """
        member = await self._require(member_id)
        fields = dict(fields)

        if not member.is_pre_approval and not admin_override:
            raise ProfileLockedError(
                member_id, "approved applications require an administrative override"
            )
        if set(fields) & set(CONSENT_FIELD_KEYS):
            raise ProfileLockedError(
                member_id, "consent is captured at submission and cannot be changed"
            )

        category = member.category
        if CATEGORY_KEY in fields:
            category = self._parse_category(fields.pop(CATEGORY_KEY))
            if category != member.category and member.is_active:
                raise ProfileLockedError(member_id, "category cannot change once active")

        featured = fields.pop(FEATURED_KEY, None)

        updated = await self._merge_fields(
            member, category, fields, PROFILE_SECTIONS, enforce_required=True,
            member_users=member_users,
        )
        if featured is not None:
            updated.featured_member = bool(featured)

        saved = await self._repo.save_profile(updated)
        logger.bind(
            member_id=member_id, fields=sorted(fields), admin_override=admin_override
        ).info(f"Profil mis a jour: {member_id}")
        return saved

    async def save_draft(self, member_id: str, fields: Mapping[str, Any]) -> Member:
        """
        Enregistre un brouillon : formats controles, champs obligatoires non exiges.

        Les consentements restent modifiables tant que la demande est un brouillon.

        Raises:
            ProfileLockedError: Demande deja en cours d'approbation ou approuvee
        """
        member = await self._require(member_id)
        if member.status not in DRAFT_EDITABLE_STATUSES:
            raise ProfileLockedError(
                member_id, f"drafts cannot be saved in status {member.status.value}"
            )

        fields = dict(fields)
        consent_values = {k: fields.pop(k) for k in list(fields) if k in CONSENT_FIELD_KEYS}
        if consent_values and member.status != MemberStatus.DRAFT:
            raise ProfileLockedError(
                member_id, "consent is captured at submission and cannot be changed"
            )

        sections = CREATE_SECTIONS if consent_values else PROFILE_SECTIONS
        updated = await self._merge_fields(
            member, member.category, {**fields, **consent_values}, sections,
            enforce_required=False,
        )
        if consent_values:
            updated.member_consent = replace(
                member.member_consent,
                **{CONSENT_FIELD_KEYS[k]: bool(v) for k, v in consent_values.items()},
            )

        saved = await self._repo.save_profile(updated)
        logger.bind(member_id=member_id).debug(f"Brouillon enregistre: {member_id}")
        return saved

    async def _merge_fields(
        self,
        member: Member,
        category: MemberCategory,
        fields: dict[str, Any],
        sections: Sequence[str],
        enforce_required: bool,
        member_users: Optional[Sequence[MemberUser]] = None,
    ) -> Member:
        """Valide les cles fournies puis retourne une copie fusionnee de la demande."""
        schema = await self._schema_catalog.list_fields(category.value, sections)
        known = {definition.key for definition in schema}

        errors: dict[str, FieldError] = {
            key: FieldError(FieldErrorKind.BUSINESS_RULE, f"{key} is not an editable field")
            for key in fields
            if key not in known
        }
        result = await self._field_validator.validate(
            schema, fields, only=fields.keys(), enforce_required=enforce_required
        )
        errors.update(result.errors)
        if member_users is not None:
            errors.update(check_member_users(member_users))
        if errors:
            raise FieldValidationError(errors)

        now = self._clock()
        snapshots = member.user_snapshots
        if member_users is not None and self._users_changed(member, member_users):
            await self._identity_validator.validate(member_users)
            snapshots = [UserSnapshot.from_member_user(u, now) for u in member_users]

        organisation_info = member.organisation_info.with_field_values(
            {**fields, **result.cleaned}
        )
        organisation_info = await self._geocode(self._with_country_code(organisation_info))

        return replace(
            member,
            category=category,
            organisation_info=organisation_info,
            user_snapshots=snapshots,
            updated_at=now,
        )

    # ------------------------------------------------------------------
    # Utilisateurs associes
    # ------------------------------------------------------------------

    async def add_user_snapshot(self, member_id: str, user: MemberUser) -> Member:
        """Associe un nouvel utilisateur a la demande."""
        member = await self._require(member_id)
        users = [s.to_member_user() for s in member.user_snapshots]
        return await self._replace_users(member, [*users, user])

    async def edit_user_snapshot(self, member_id: str, user_id: str, user: MemberUser) -> Member:
        """
        Remplace l'utilisateur user_id par les valeurs fournies.

        Raises:
            NotFoundError: Utilisateur non associe a la demande
        """
        member = await self._require(member_id)
        users = [s.to_member_user() for s in member.user_snapshots]
        index = self._index_of_user(member, user_id)
        users[index] = replace(user, id=user_id)
        return await self._replace_users(member, users)

    async def remove_user_snapshot(self, member_id: str, user_id: str) -> Member:
        """
        Dissocie un utilisateur de la demande.

        Raises:
            NotFoundError: Utilisateur non associe a la demande
            FieldValidationError: Dernier utilisateur de la demande
        """
        member = await self._require(member_id)
        index = self._index_of_user(member, user_id)
        users = [s.to_member_user() for i, s in enumerate(member.user_snapshots) if i != index]
        return await self._replace_users(member, users)

    async def refresh_user_snapshot(self, snapshot: UserSnapshot) -> int:
        """
        Rafraichit les snapshots d'un utilisateur modifie dans l'annuaire.

        Point d'entree du processus de synchronisation externe.

        Returns:
            Nombre de snapshots mis a jour
        """
        refreshed = replace(snapshot, last_synced_at=self._clock())
        count = await self._repo.refresh_user_snapshots(refreshed)
        logger.debug(f"Snapshots rafraichis pour l'utilisateur {snapshot.id}: {count}")
        return count

    async def _replace_users(self, member: Member, users: list[MemberUser]) -> Member:
        errors = check_member_users(users)
        if errors:
            raise FieldValidationError(errors)
        await self._identity_validator.validate(users)

        now = self._clock()
        updated = replace(
            member,
            user_snapshots=[UserSnapshot.from_member_user(u, now) for u in users],
            updated_at=now,
        )
        return await self._repo.save_profile(updated)

    @staticmethod
    def _index_of_user(member: Member, user_id: str) -> int:
        for index, snapshot in enumerate(member.user_snapshots):
            if snapshot.id == user_id:
                return index
        raise NotFoundError(f"{member.member_id}/users/{user_id}")

    @staticmethod
    def _users_changed(member: Member, users: Sequence[MemberUser]) -> bool:
        return [s.to_member_user() for s in member.user_snapshots] != list(users)

    # ------------------------------------------------------------------
    # Lectures et retrait
    # ------------------------------------------------------------------

    async def get_application(self, member_id: str) -> Member:
        """Retourne la demande, NotFoundError si absente ou retiree."""
        return await self._require(member_id)

    async def get_by_application_number(self, application_number: str) -> Member:
        """Retourne la demande portant ce numero de dossier."""
        member = await self._repo.get_by_application_number(application_number)
        if member is None:
            raise NotFoundError(application_number)
        return member

    async def search(
        self,
        query: Optional[str] = None,
        status: Optional[MemberStatus | str] = None,
        page: int = 1,
        page_size: int = 20,
    ) -> SearchPage:
        """Recherche paginee (page commence a 1)."""
        page = max(page, 1)
        status = MemberStatus(status) if status else None
        items, total = await self._repo.search(
            query=query, status=status, offset=(page - 1) * page_size, limit=page_size
        )
        return SearchPage(items=items, total=total, page=page, page_size=page_size)

    async def retire_application(self, member_id: str) -> None:
        """Retire logiquement une demande (deleted_at renseigne)."""
        if not await self._repo.soft_delete(member_id):
            raise NotFoundError(member_id)
        logger.bind(member_id=member_id).info(f"Demande retiree: {member_id}")

    async def _require(self, member_id: str) -> Member:
        member = await self._repo.get(member_id)
        if member is None:
            raise NotFoundError(member_id)
        return member

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _parse_category(raw: MemberCategory | str) -> MemberCategory:
        try:
            return MemberCategory(raw)
        except ValueError:
            raise FieldValidationError({
                CATEGORY_KEY: FieldError(
                    FieldErrorKind.INVALID_CHOICE, "Membership category is not valid"
                )
            }) from None

    @staticmethod
    def _with_country_code(organisation_info: OrganisationInfo) -> OrganisationInfo:
        address = organisation_info.address
        if address is None or not address.country:
            return organisation_info
        code = country_to_alpha2(address.country)
        if code == address.country_code:
            return organisation_info
        return replace(organisation_info, address=replace(address, country_code=code))

    async def _geocode(self, organisation_info: OrganisationInfo) -> OrganisationInfo:
        """Geocodage de meilleur effort : un echec n'empeche jamais l'ecriture."""
        address = organisation_info.address
        if self._geocoder is None or address is None:
            return organisation_info
        if address.has_coordinates or not address.is_geocodable:
            return organisation_info

        try:
            coordinates = await self._geocoder.resolve(address)
        except Exception as e:
            logger.warning(f"Geocodage impossible: {type(e).__name__}: {e}")
            return organisation_info

        if coordinates is None or not coordinates.is_set:
            return organisation_info
        return replace(
            organisation_info,
            address=replace(
                address, latitude=coordinates.latitude, longitude=coordinates.longitude
            ),
        )
