"""
Implementation SQLModel du depot des demandes d'adhesion.

Implemente IMemberRepository avec conversion bidirectionnelle entre l'entite
Member (domaine) et les modeles members / member_user_snapshots /
member_status_history (persistance).

Chaque ecriture est une transaction unique. Le changement de statut est une
ecriture conditionnelle (UPDATE ... WHERE status = statut lu) : zero ligne
modifiee signifie qu'un autre acteur a gagne la course.
"""

import json
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import Engine, func, or_, update
from sqlmodel import Session, select

from memberflow.core.entities.member import (
    Address,
    ApprovalStage,
    Member,
    MemberCategory,
    MemberConsent,
    MemberStatus,
    OrganisationInfo,
    SocialLinks,
    StatusHistoryEntry,
    UserSnapshot,
    WorkflowAction,
)
from memberflow.core.errors import ConcurrentModificationError, NotFoundError
from memberflow.core.ports.repositories import IMemberRepository
from memberflow.infrastructure.persistence.executor import StoreExecutor
from memberflow.infrastructure.persistence.models import (
    MemberModel,
    MemberStatusHistoryModel,
    MemberUserSnapshotModel,
    as_utc,
)
from memberflow.infrastructure.persistence.repositories.identity_store import (
    retire_identities,
    upsert_identity,
)


def format_member_id(pk: int) -> str:
    """Identifiant externe derive de la cle primaire (MEMBER-001)."""
    return f"MEMBER-{pk:03d}"


def format_application_number(pk: int) -> str:
    """Numero de dossier derive de la cle primaire (APP-001)."""
    return f"APP-{pk:03d}"


class SQLModelMemberRepository(IMemberRepository):
    """
    Depot SQLModel des demandes d'adhesion.

    Les requetes sont executees via StoreExecutor, une session par appel.
    """

    def __init__(self, engine: Engine, executor: StoreExecutor) -> None:
        self._engine = engine
        self._executor = executor

    # ------------------------------------------------------------------
    # Conversion
    # ------------------------------------------------------------------

    def _to_entity(self, session: Session, model: MemberModel) -> Member:
        """Convertit un modele DB (et ses lignes filles) en entite domaine."""
        address = None
        if model.has_address:
            address = Address(
                line1=model.address_line1,
                line2=model.address_line2,
                city=model.address_city,
                state=model.address_state,
                country=model.address_country,
                country_code=model.address_country_code,
                zip=model.address_zip,
                latitude=model.latitude,
                longitude=model.longitude,
            )
        social = json.loads(model.social_links_json) if model.social_links_json else {}

        snapshot_rows = session.exec(
            select(MemberUserSnapshotModel)
            .where(MemberUserSnapshotModel.member_pk == model.id)
            .order_by(MemberUserSnapshotModel.position)
        ).all()
        history_rows = session.exec(
            select(MemberStatusHistoryModel)
            .where(MemberStatusHistoryModel.member_pk == model.id)
            .order_by(MemberStatusHistoryModel.id)
        ).all()

        return Member(
            member_id=model.member_id,
            application_number=model.application_number,
            category=MemberCategory(model.category),
            status=MemberStatus(model.status),
            featured_member=model.featured_member,
            organisation_info=OrganisationInfo(
                company_name=model.company_name,
                type_of_organization=model.type_of_organization,
                industries=model.industries,
                website_url=model.website_url,
                contact_number=model.contact_number,
                member_logo_url=model.member_logo_url,
                member_licence_url=model.member_licence_url,
                address=address,
                social_links=SocialLinks(**social),
            ),
            user_snapshots=[self._snapshot_to_entity(row) for row in snapshot_rows],
            member_consent=MemberConsent(
                article_of_association_consent=model.article_of_association_consent,
                article_of_association_criteria_consent=model.article_of_association_criteria_consent,
                authorized_person_declaration=model.authorized_person_declaration,
            ),
            status_history=[self._history_to_entity(row) for row in history_rows],
            created_at=as_utc(model.created_at),
            updated_at=as_utc(model.updated_at),
            deleted_at=as_utc(model.deleted_at),
        )

    @staticmethod
    def _snapshot_to_entity(row: MemberUserSnapshotModel) -> UserSnapshot:
        return UserSnapshot(
            id=row.user_id,
            email=row.email,
            user_type=row.user_type,
            first_name=row.first_name,
            last_name=row.last_name,
            correspondance_user=row.correspondance_user,
            marketing_focal_point=row.marketing_focal_point,
            investor_focal_point=row.investor_focal_point,
            designation=row.designation,
            contact_number=row.contact_number,
            newsletter_subscription=row.newsletter_subscription,
            last_synced_at=as_utc(row.last_synced_at),
        )

    @staticmethod
    def _history_to_entity(row: MemberStatusHistoryModel) -> StatusHistoryEntry:
        return StatusHistoryEntry(
            actor_id=row.actor_id,
            timestamp=as_utc(row.timestamp),
            from_status=MemberStatus(row.from_status),
            to_status=MemberStatus(row.to_status),
            action=WorkflowAction(row.action),
            stage=ApprovalStage(row.stage) if row.stage else None,
            comment=row.comment,
        )

    @staticmethod
    def _apply_profile(model: MemberModel, member: Member) -> None:
        """Copie profil, categorie et consentements de l'entite vers le modele."""
        org = member.organisation_info
        model.category = MemberCategory(member.category).value
        model.featured_member = member.featured_member
        model.company_name = org.company_name or ""
        model.type_of_organization = org.type_of_organization
        model.industries_json = json.dumps(list(org.industries or []))
        model.website_url = org.website_url
        model.contact_number = org.contact_number
        model.member_logo_url = org.member_logo_url
        model.member_licence_url = org.member_licence_url
        model.social_links_json = json.dumps(vars(org.social_links))

        address = org.address
        model.has_address = address is not None
        address = address or Address()
        model.address_line1 = address.line1
        model.address_line2 = address.line2
        model.address_city = address.city
        model.address_state = address.state
        model.address_country = address.country
        model.address_country_code = address.country_code
        model.address_zip = address.zip
        model.latitude = address.latitude
        model.longitude = address.longitude

        consent = member.member_consent
        model.article_of_association_consent = consent.article_of_association_consent
        model.article_of_association_criteria_consent = (
            consent.article_of_association_criteria_consent
        )
        model.authorized_person_declaration = consent.authorized_person_declaration
        model.updated_at = member.updated_at or datetime.now(timezone.utc)

    @staticmethod
    def _history_to_model(pk: int, entry: StatusHistoryEntry) -> MemberStatusHistoryModel:
        return MemberStatusHistoryModel(
            member_pk=pk,
            actor_id=entry.actor_id,
            timestamp=entry.timestamp,
            from_status=MemberStatus(entry.from_status).value,
            to_status=MemberStatus(entry.to_status).value,
            action=WorkflowAction(entry.action).value,
            stage=ApprovalStage(entry.stage).value if entry.stage else None,
            comment=entry.comment,
        )

    def _write_snapshots(
        self, session: Session, model: MemberModel, snapshots: list[UserSnapshot]
    ) -> None:
        """
        Synchronise l'annuaire puis remplace les snapshots de la demande.

        Les utilisateurs retires de la demande sont supprimes logiquement de
        l'annuaire avant l'ecriture des nouveaux, pour liberer leur email.
        """
        keep_ids = {str(s.id) for s in snapshots if s.id}
        retire_identities(session, model.member_id, keep_ids)
        session.flush()

        existing = session.exec(
            select(MemberUserSnapshotModel).where(MemberUserSnapshotModel.member_pk == model.id)
        ).all()
        for row in existing:
            session.delete(row)
        session.flush()

        for position, snapshot in enumerate(snapshots):
            user_id = upsert_identity(session, snapshot, model.member_id)
            session.add(
                MemberUserSnapshotModel(
                    member_pk=model.id,
                    position=position,
                    user_id=user_id,
                    email=snapshot.email.strip(),
                    user_type=snapshot.user_type.value,
                    first_name=snapshot.first_name,
                    last_name=snapshot.last_name,
                    correspondance_user=snapshot.correspondance_user,
                    marketing_focal_point=snapshot.marketing_focal_point,
                    investor_focal_point=snapshot.investor_focal_point,
                    designation=snapshot.designation,
                    contact_number=snapshot.contact_number,
                    newsletter_subscription=snapshot.newsletter_subscription,
                    last_synced_at=snapshot.last_synced_at,
                )
            )

    @staticmethod
    def _active_by_member_id(member_id: str):
        return select(MemberModel).where(
            MemberModel.member_id == member_id,
            MemberModel.deleted_at.is_(None),
        )

    # ------------------------------------------------------------------
    # Lectures
    # ------------------------------------------------------------------

    async def get(self, member_id: str) -> Optional[Member]:
        """Recupere une demande par son memberId."""
        return await self._executor.read("members.get", self._get_sync, member_id)

    def _get_sync(self, member_id: str) -> Optional[Member]:
        with Session(self._engine) as session:
            model = session.exec(self._active_by_member_id(member_id)).first()
            return self._to_entity(session, model) if model else None

    async def get_by_application_number(self, application_number: str) -> Optional[Member]:
        """Recupere une demande par son numero de dossier."""
        return await self._executor.read(
            "members.get_by_application_number", self._get_by_number_sync, application_number
        )

    def _get_by_number_sync(self, application_number: str) -> Optional[Member]:
        statement = select(MemberModel).where(
            MemberModel.application_number == application_number,
            MemberModel.deleted_at.is_(None),
        )
        with Session(self._engine) as session:
            model = session.exec(statement).first()
            return self._to_entity(session, model) if model else None

    async def search(
        self,
        query: Optional[str] = None,
        status: Optional[MemberStatus] = None,
        offset: int = 0,
        limit: int = 20,
    ) -> tuple[list[Member], int]:
        """Recherche paginee par nom d'organisation, memberId ou numero de dossier."""
        return await self._executor.read(
            "members.search", self._search_sync, query, status, offset, limit
        )

    def _search_sync(
        self,
        query: Optional[str],
        status: Optional[MemberStatus],
        offset: int,
        limit: int,
    ) -> tuple[list[Member], int]:
        conditions = [MemberModel.deleted_at.is_(None)]
        if status is not None:
            conditions.append(MemberModel.status == MemberStatus(status).value)
        if query:
            pattern = f"%{query.strip().lower()}%"
            conditions.append(
                or_(
                    func.lower(MemberModel.company_name).like(pattern),
                    func.lower(MemberModel.member_id).like(pattern),
                    func.lower(MemberModel.application_number).like(pattern),
                )
            )

        with Session(self._engine) as session:
            total = session.exec(
                select(func.count()).select_from(MemberModel).where(*conditions)
            ).one()
            models = session.exec(
                select(MemberModel)
                .where(*conditions)
                .order_by(MemberModel.id.desc())
                .offset(offset)
                .limit(limit)
            ).all()
            return [self._to_entity(session, m) for m in models], total

    async def list_active(self) -> list[Member]:
        """Liste les demandes au statut active."""
        return await self._executor.read("members.list_active", self._list_sync, True)

    async def list_all(self) -> list[Member]:
        """Liste toutes les demandes non supprimees."""
        return await self._executor.read("members.list_all", self._list_sync, False)

    def _list_sync(self, active_only: bool) -> list[Member]:
        statement = select(MemberModel).where(MemberModel.deleted_at.is_(None))
        if active_only:
            statement = statement.where(MemberModel.status == MemberStatus.ACTIVE.value)
        with Session(self._engine) as session:
            models = session.exec(statement.order_by(MemberModel.id)).all()
            return [self._to_entity(session, m) for m in models]

    # ------------------------------------------------------------------
    # Ecritures
    # ------------------------------------------------------------------

    async def add(self, member: Member) -> Member:
        """Insere une demande, ses snapshots et son historique dans une transaction."""
        return await self._executor.write("members.add", self._add_sync, member)

    def _add_sync(self, member: Member) -> Member:
        with Session(self._engine) as session:
            model = MemberModel(
                category=MemberCategory(member.category).value,
                status=MemberStatus(member.status).value,
                created_at=member.created_at or datetime.now(timezone.utc),
            )
            self._apply_profile(model, member)
            session.add(model)
            session.flush()

            model.member_id = format_member_id(model.id)
            model.application_number = format_application_number(model.id)
            session.add(model)

            self._write_snapshots(session, model, member.user_snapshots)
            for entry in member.status_history:
                session.add(self._history_to_model(model.id, entry))

            session.commit()
            session.refresh(model)
            return self._to_entity(session, model)

    async def update_status(
        self,
        member: Member,
        expected_status: MemberStatus,
        entry: StatusHistoryEntry,
    ) -> Member:
        """Ecriture conditionnelle du statut et de l'entree d'historique."""
        return await self._executor.write(
            "members.update_status", self._update_status_sync, member, expected_status, entry
        )

    def _update_status_sync(
        self,
        member: Member,
        expected_status: MemberStatus,
        entry: StatusHistoryEntry,
    ) -> Member:
        statement = (
            update(MemberModel)
            .where(
                MemberModel.member_id == member.member_id,
                MemberModel.status == MemberStatus(expected_status).value,
                MemberModel.deleted_at.is_(None),
            )
            .values(
                status=MemberStatus(member.status).value,
                updated_at=member.updated_at or datetime.now(timezone.utc),
            )
        )
        with Session(self._engine) as session:
            result = session.connection().execute(statement)
            if result.rowcount == 0:
                session.rollback()
                raise ConcurrentModificationError(
                    member.member_id, MemberStatus(expected_status).value
                )

            model = session.exec(self._active_by_member_id(member.member_id)).one()
            session.add(self._history_to_model(model.id, entry))
            session.commit()
            session.refresh(model)
            return self._to_entity(session, model)

    async def save_profile(self, member: Member) -> Member:
        """Met a jour profil, categorie, consentements et snapshots (statut inchange)."""
        return await self._executor.write("members.save_profile", self._save_profile_sync, member)

    def _save_profile_sync(self, member: Member) -> Member:
        with Session(self._engine) as session:
            model = session.exec(self._active_by_member_id(member.member_id)).first()
            if model is None:
                raise NotFoundError(member.member_id)

            self._apply_profile(model, member)
            session.add(model)
            self._write_snapshots(session, model, member.user_snapshots)

            session.commit()
            session.refresh(model)
            return self._to_entity(session, model)

    async def refresh_user_snapshots(self, snapshot: UserSnapshot) -> int:
        """Remplace les snapshots de l'utilisateur dans toutes les demandes."""
        return await self._executor.write(
            "members.refresh_user_snapshots", self._refresh_snapshots_sync, snapshot
        )

    def _refresh_snapshots_sync(self, snapshot: UserSnapshot) -> int:
        if not snapshot.id:
            return 0
        statement = select(MemberUserSnapshotModel).where(
            MemberUserSnapshotModel.user_id == str(snapshot.id)
        )
        with Session(self._engine) as session:
            rows = session.exec(statement).all()
            for row in rows:
                # Les drapeaux propres a la demande (correspondance, ...) sont conserves
                row.email = snapshot.email.strip()
                row.user_type = snapshot.user_type.value
                row.first_name = snapshot.first_name
                row.last_name = snapshot.last_name
                row.designation = snapshot.designation
                row.contact_number = snapshot.contact_number
                row.newsletter_subscription = snapshot.newsletter_subscription
                row.last_synced_at = snapshot.last_synced_at
                session.add(row)
            session.commit()
            return len(rows)

    async def soft_delete(self, member_id: str) -> bool:
        """Renseigne deleted_at sur la demande et libere ses utilisateurs dans l'annuaire."""
        return await self._executor.write("members.soft_delete", self._soft_delete_sync, member_id)

    def _soft_delete_sync(self, member_id: str) -> bool:
        with Session(self._engine) as session:
            model = session.exec(self._active_by_member_id(member_id)).first()
            if model is None:
                return False
            model.deleted_at = datetime.now(timezone.utc)
            session.add(model)
            retire_identities(session, member_id, set())
            session.commit()
            return True
