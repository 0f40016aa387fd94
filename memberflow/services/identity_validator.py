"""
Validation d'unicite des identites.

IdentityUniquenessValidator verifie, avant toute ecriture, que les utilisateurs
d'une demande ne violent pas les regles d'unicite de l'annuaire :
- email unique parmi les utilisateurs non supprimes (insensible a la casse)
- au plus un utilisateur Primary par domaine email

Les controles sont d'abord faits a l'interieur du lot soumis, puis contre
l'annuaire (requetes concurrentes). La premiere violation dans l'ordre des
entrees est levee.
"""

import asyncio
from typing import Optional, Sequence

from loguru import logger

from memberflow.core.entities.member import MemberUser, UserType
from memberflow.core.errors import (
    ConflictError,
    DuplicateEmailError,
    DuplicatePrimaryDomainError,
)
from memberflow.core.ports.catalogs import IIdentityStore
from memberflow.utils.helpers import email_domain, mask_email, normalize_email


class IdentityUniquenessValidator:
    """
    Validateur d'unicite des emails et des domaines Primary.

    Example:
        validator = IdentityUniquenessValidator(identity_store)
        await validator.validate(member_users)
    """

    def __init__(self, identity_store: IIdentityStore) -> None:
        self._identity_store = identity_store

    async def validate(self, users: Sequence[MemberUser]) -> None:
        """
        Verifie l'unicite des utilisateurs fournis.

        Args:
            users: Utilisateurs de la demande (id renseigne pour un existant)

        Raises:
            DuplicateEmailError: Email deja utilise
            DuplicatePrimaryDomainError: Domaine deja utilise par un Primary
            ExternalLookupError: Annuaire indisponible
        """
        if not users:
            return

        self._check_batch(users)

        outcomes = await asyncio.gather(*(self._check_entry(user) for user in users))
        for outcome in outcomes:
            if outcome is not None:
                logger.info(f"Conflit d'identite: {outcome.kind.value}")
                raise outcome

    def _check_batch(self, users: Sequence[MemberUser]) -> None:
        """Controle croise a l'interieur du lot, dans l'ordre des entrees."""
        seen_emails: dict[str, MemberUser] = {}
        seen_domains: dict[str, MemberUser] = {}

        for user in users:
            email = normalize_email(user.email)
            if email in seen_emails:
                raise DuplicateEmailError(user.email, mask_email(seen_emails[email].email))
            seen_emails[email] = user

            if user.user_type != UserType.PRIMARY:
                continue
            domain = email_domain(user.email)
            if domain in seen_domains:
                raise DuplicatePrimaryDomainError(domain, mask_email(seen_domains[domain].email))
            seen_domains[domain] = user

    async def _check_entry(self, user: MemberUser) -> Optional[ConflictError]:
        """
        Controle une entree contre l'annuaire.

        Le controle de domaine n'est lance qu'apres celui de l'email de la
        meme entree. Retourne le conflit au lieu de le lever pour que
        l'appelant respecte l'ordre des entrees.
        """
        existing = await self._identity_store.find_active_by_email(
            user.email, exclude_id=user.id
        )
        if existing is not None:
            return DuplicateEmailError(user.email, mask_email(existing.email))

        if user.user_type != UserType.PRIMARY:
            return None

        domain = email_domain(user.email)
        holder = await self._identity_store.find_active_primary_by_domain(
            domain, exclude_id=user.id
        )
        if holder is not None:
            return DuplicatePrimaryDomainError(domain, mask_email(holder.email))
        return None
