"""
Tests unitaires pour IdentityUniquenessValidator.

Verifie :
- Email deja utilise dans l'annuaire (insensible a la casse)
- Domaine deja utilise par un Primary (les Secondary partagent librement)
- Doublons a l'interieur du lot soumis
- Exclusion de l'utilisateur lui-meme (id renseigne)
- Premiere violation dans l'ordre des entrees
"""

import pytest

from memberflow.core.entities.catalog import IdentityUser
from memberflow.core.entities.member import MemberUser, UserType
from memberflow.core.errors import (
    ConflictKind,
    DuplicateEmailError,
    DuplicatePrimaryDomainError,
    ExternalLookupError,
)
from memberflow.services.identity_validator import IdentityUniquenessValidator
from tests.fixtures.fakes import FakeIdentityStore


def _existing(id: str, email: str, user_type: UserType = UserType.PRIMARY) -> IdentityUser:
    return IdentityUser(id=id, email=email, user_type=user_type, member_id="MEMBER-001")


class TestDirectoryConflicts:
    @pytest.mark.asyncio
    async def test_new_users_pass(self, identity_store):
        validator = IdentityUniquenessValidator(identity_store)
        await validator.validate([
            MemberUser(email="ceo@acme.io", user_type=UserType.PRIMARY),
            MemberUser(email="ops@acme.io", user_type=UserType.SECONDARY),
        ])

    @pytest.mark.asyncio
    async def test_empty_list_is_noop(self, identity_store):
        await IdentityUniquenessValidator(identity_store).validate([])
        assert identity_store.email_lookups == []

    @pytest.mark.asyncio
    async def test_duplicate_email_is_case_insensitive(self):
        store = FakeIdentityStore([_existing("7", "john.smith@acme.com", UserType.SECONDARY)])
        validator = IdentityUniquenessValidator(store)

        with pytest.raises(DuplicateEmailError) as exc_info:
            await validator.validate([MemberUser(email="John.Smith@ACME.com", user_type="Secondary")])

        error = exc_info.value
        assert error.kind == ConflictKind.DUPLICATE_EMAIL
        assert error.masked_email == "joh**@acme.com"
        assert "joh**@acme.com" in str(error)

    @pytest.mark.asyncio
    async def test_primary_domain_conflict(self):
        store = FakeIdentityStore([_existing("3", "founder@acme.com")])
        validator = IdentityUniquenessValidator(store)

        with pytest.raises(DuplicatePrimaryDomainError) as exc_info:
            await validator.validate([MemberUser(email="jane@acme.com", user_type=UserType.PRIMARY)])

        error = exc_info.value
        assert error.domain == "acme.com"
        assert "@acme.com" in error.detail
        assert "fou**@acme.com" in error.detail

    @pytest.mark.asyncio
    async def test_secondary_may_share_primary_domain(self):
        store = FakeIdentityStore([_existing("3", "founder@acme.com")])
        validator = IdentityUniquenessValidator(store)

        await validator.validate([MemberUser(email="jane@acme.com", user_type=UserType.SECONDARY)])
        assert store.domain_lookups == []

    @pytest.mark.asyncio
    async def test_existing_user_is_excluded_from_its_own_checks(self):
        store = FakeIdentityStore([_existing("3", "founder@acme.com")])
        validator = IdentityUniquenessValidator(store)

        await validator.validate([
            MemberUser(id="3", email="founder@acme.com", user_type=UserType.PRIMARY)
        ])

    @pytest.mark.asyncio
    async def test_email_conflict_wins_over_domain_conflict(self):
        store = FakeIdentityStore([_existing("3", "founder@acme.com")])
        validator = IdentityUniquenessValidator(store)

        with pytest.raises(DuplicateEmailError):
            await validator.validate([MemberUser(email="founder@acme.com", user_type=UserType.PRIMARY)])

    @pytest.mark.asyncio
    async def test_first_violation_in_input_order(self):
        store = FakeIdentityStore([
            _existing("1", "taken@first.io", UserType.SECONDARY),
            _existing("2", "boss@second.io"),
        ])
        validator = IdentityUniquenessValidator(store)

        with pytest.raises(DuplicatePrimaryDomainError):
            await validator.validate([
                MemberUser(email="new@second.io", user_type=UserType.PRIMARY),
                MemberUser(email="taken@first.io", user_type=UserType.SECONDARY),
            ])

    @pytest.mark.asyncio
    async def test_store_failure_propagates(self):
        class BrokenStore(FakeIdentityStore):
            async def find_active_by_email(self, email, exclude_id=None):
                raise ExternalLookupError("identity.find_by_email", "timeout")

        validator = IdentityUniquenessValidator(BrokenStore())
        with pytest.raises(ExternalLookupError):
            await validator.validate([MemberUser(email="a@b.io")])


class TestBatchConflicts:
    @pytest.mark.asyncio
    async def test_same_email_twice_in_batch(self, identity_store):
        validator = IdentityUniquenessValidator(identity_store)
        with pytest.raises(DuplicateEmailError):
            await validator.validate([
                MemberUser(email="ceo@acme.io", user_type=UserType.PRIMARY),
                MemberUser(email="CEO@acme.io", user_type=UserType.SECONDARY),
            ])
        assert identity_store.email_lookups == []

    @pytest.mark.asyncio
    async def test_two_primaries_same_domain_in_batch(self, identity_store):
        validator = IdentityUniquenessValidator(identity_store)
        with pytest.raises(DuplicatePrimaryDomainError) as exc_info:
            await validator.validate([
                MemberUser(email="ceo@acme.io", user_type=UserType.PRIMARY),
                MemberUser(email="cfo@acme.io", user_type=UserType.PRIMARY),
            ])
        assert exc_info.value.masked_email == "ceo**@acme.io"
