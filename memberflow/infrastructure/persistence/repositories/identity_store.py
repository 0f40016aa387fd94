"""
Implementation SQLModel de l'annuaire des utilisateurs.

Lectures (IIdentityStore) pour le validateur d'unicite, et fonctions
d'ecriture utilisees par le depot des demandes dans sa propre transaction.
Les index uniques partiels de la table users sont le dernier rempart contre
les doublons : une IntegrityError est traduite en erreur de conflit.
"""

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import Engine
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from memberflow.core.entities.catalog import IdentityUser
from memberflow.core.entities.member import UserSnapshot, UserType
from memberflow.core.errors import DuplicateEmailError, DuplicatePrimaryDomainError
from memberflow.core.ports.catalogs import IIdentityStore
from memberflow.infrastructure.persistence.executor import StoreExecutor
from memberflow.infrastructure.persistence.models import UserModel
from memberflow.utils.helpers import email_domain, mask_email, normalize_email


def _exclude(statement, exclude_id: Optional[str]):
    if exclude_id and str(exclude_id).isdigit():
        statement = statement.where(UserModel.id != int(exclude_id))
    return statement


def _to_identity(model: UserModel) -> IdentityUser:
    return IdentityUser(
        id=str(model.id),
        email=model.email,
        user_type=UserType.parse(model.user_type),
        member_id=model.member_id,
    )


def find_by_email(
    session: Session, email: str, exclude_id: Optional[str] = None
) -> Optional[UserModel]:
    """Utilisateur non supprime portant cet email (insensible a la casse)."""
    statement = select(UserModel).where(
        UserModel.email_normalized == normalize_email(email),
        UserModel.deleted_at.is_(None),
    )
    return session.exec(_exclude(statement, exclude_id)).first()


def find_primary_by_domain(
    session: Session, domain: str, exclude_id: Optional[str] = None
) -> Optional[UserModel]:
    """Utilisateur Primary non supprime portant ce domaine."""
    statement = select(UserModel).where(
        UserModel.primary_domain == domain.strip().lower(),
        UserModel.deleted_at.is_(None),
    )
    return session.exec(_exclude(statement, exclude_id)).first()


def upsert_identity(session: Session, snapshot: UserSnapshot, member_id: str) -> str:
    """
    Cree ou met a jour la ligne users d'un snapshot, dans la transaction courante.

    Le type "Secondry" historique n'est jamais reecrit : UserType.parse l'a
    deja normalise dans le snapshot.

    Returns:
        L'identifiant de l'utilisateur

    Raises:
        DuplicateEmailError / DuplicatePrimaryDomainError: Index unique viole
    """
    model = None
    if snapshot.id and str(snapshot.id).isdigit():
        model = session.get(UserModel, int(snapshot.id))
        if model is not None and model.deleted_at is not None:
            model = None
    if model is None:
        model = UserModel(email=snapshot.email, email_normalized="", user_type="")

    user_type = UserType.parse(snapshot.user_type)
    model.email = snapshot.email.strip()
    model.email_normalized = normalize_email(snapshot.email)
    model.user_type = user_type.value
    primary_domain = email_domain(snapshot.email) if user_type == UserType.PRIMARY else ""
    model.primary_domain = primary_domain or None
    model.first_name = snapshot.first_name
    model.last_name = snapshot.last_name
    model.member_id = model.member_id or member_id
    session.add(model)

    try:
        session.flush()
    except IntegrityError as error:
        session.rollback()
        raise conflict_from_integrity_error(session, error, snapshot) from error
    return str(model.id)


def retire_identities(session: Session, member_id: str, keep_ids: set[str]) -> int:
    """Supprime logiquement les utilisateurs de la demande qui n'y sont plus associes."""
    statement = select(UserModel).where(
        UserModel.member_id == member_id,
        UserModel.deleted_at.is_(None),
    )
    now = datetime.now(timezone.utc)
    retired = 0
    for model in session.exec(statement).all():
        if str(model.id) not in keep_ids:
            model.deleted_at = now
            session.add(model)
            retired += 1
    return retired


def conflict_from_integrity_error(
    session: Session, error: IntegrityError, snapshot: UserSnapshot
) -> Exception:
    """
    Traduit une violation d'index unique en erreur de conflit.

    La session doit avoir ete annulee (rollback) avant l'appel.
    """
    message = str(error.orig).lower()
    if "primary_domain" in message:
        domain = email_domain(snapshot.email)
        holder = find_primary_by_domain(session, domain)
        masked = mask_email(holder.email if holder else snapshot.email)
        return DuplicatePrimaryDomainError(domain, masked)
    if "email_normalized" in message:
        holder = find_by_email(session, snapshot.email)
        return DuplicateEmailError(snapshot.email, mask_email(holder.email if holder else snapshot.email))
    return error


class SQLModelIdentityStore(IIdentityStore):
    """Annuaire des utilisateurs adosse a la table users."""

    def __init__(self, engine: Engine, executor: StoreExecutor) -> None:
        self._engine = engine
        self._executor = executor

    async def find_active_by_email(
        self, email: str, exclude_id: Optional[str] = None
    ) -> Optional[IdentityUser]:
        """Utilisateur non supprime avec cet email (insensible a la casse)."""
        return await self._executor.read(
            "identity.find_by_email", self._find_by_email_sync, email, exclude_id
        )

    async def find_active_primary_by_domain(
        self, domain: str, exclude_id: Optional[str] = None
    ) -> Optional[IdentityUser]:
        """Utilisateur Primary non supprime dont l'email porte ce domaine."""
        return await self._executor.read(
            "identity.find_primary_by_domain", self._find_by_domain_sync, domain, exclude_id
        )

    def _find_by_email_sync(self, email: str, exclude_id: Optional[str]) -> Optional[IdentityUser]:
        with Session(self._engine) as session:
            model = find_by_email(session, email, exclude_id)
            return _to_identity(model) if model else None

    def _find_by_domain_sync(
        self, domain: str, exclude_id: Optional[str]
    ) -> Optional[IdentityUser]:
        with Session(self._engine) as session:
            model = find_primary_by_domain(session, domain, exclude_id)
            return _to_identity(model) if model else None
