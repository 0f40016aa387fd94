"""
Tests unitaires de la machine a etats des demandes.

Verifie :
- Chaque transition definie
- Les combinaisons non definies (InvalidTransitionError)
- Le commentaire obligatoire pour un rejet
- L'entree d'historique produite par apply_transition
"""

from datetime import datetime, timezone

import pytest

from memberflow.core.entities.member import (
    ApprovalStage,
    Member,
    MemberCategory,
    MemberStatus,
    OrganisationInfo,
    WorkflowAction,
)
from memberflow.core.errors import FieldValidationError, InvalidTransitionError
from memberflow.services.state_machine import TRANSITIONS, apply_transition, transition

NOW = datetime(2026, 3, 14, 9, 30, tzinfo=timezone.utc)


class TestTransitions:
    @pytest.mark.parametrize(
        "current,action,stage,expected",
        [
            (MemberStatus.DRAFT, WorkflowAction.SUBMIT, None,
             MemberStatus.PENDING_COMMITTEE_APPROVAL),
            (MemberStatus.PENDING_FORM_SUBMISSION, WorkflowAction.SUBMIT, None,
             MemberStatus.PENDING_COMMITTEE_APPROVAL),
            (MemberStatus.PENDING_COMMITTEE_APPROVAL, WorkflowAction.APPROVE, ApprovalStage.COMMITTEE,
             MemberStatus.PENDING_BOARD_APPROVAL),
            (MemberStatus.PENDING_BOARD_APPROVAL, WorkflowAction.APPROVE, ApprovalStage.BOARD,
             MemberStatus.ACTIVE),
            (MemberStatus.REJECTED, WorkflowAction.RESUBMIT, None,
             MemberStatus.PENDING_FORM_SUBMISSION),
        ],
    )
    def test_defined_transitions(self, current, action, stage, expected):
        assert transition(current, action, stage) == expected

    @pytest.mark.parametrize(
        "current",
        [MemberStatus.PENDING_COMMITTEE_APPROVAL, MemberStatus.PENDING_BOARD_APPROVAL],
    )
    def test_reject_from_either_stage(self, current):
        assert transition(current, WorkflowAction.REJECT, None, "Incomplete statutes") == (
            MemberStatus.REJECTED
        )

    def test_reject_accepts_matching_stage(self):
        result = transition(
            MemberStatus.PENDING_BOARD_APPROVAL, WorkflowAction.REJECT, ApprovalStage.BOARD, "No"
        )
        assert result == MemberStatus.REJECTED

    def test_raw_strings_are_accepted(self):
        assert transition(MemberStatus.PENDING_BOARD_APPROVAL, "approve", "board") == (
            MemberStatus.ACTIVE
        )

    def test_table_has_seven_entries(self):
        assert len(TRANSITIONS) == 7


class TestInvalidTransitions:
    @pytest.mark.parametrize(
        "current,action,stage",
        [
            # approbation au mauvais niveau
            (MemberStatus.PENDING_COMMITTEE_APPROVAL, WorkflowAction.APPROVE, ApprovalStage.BOARD),
            (MemberStatus.PENDING_BOARD_APPROVAL, WorkflowAction.APPROVE, ApprovalStage.COMMITTEE),
            # approbation sans niveau
            (MemberStatus.PENDING_COMMITTEE_APPROVAL, WorkflowAction.APPROVE, None),
            # etats terminaux ou hors workflow
            (MemberStatus.ACTIVE, WorkflowAction.REJECT, None),
            (MemberStatus.ACTIVE, WorkflowAction.SUBMIT, None),
            (MemberStatus.REJECTED, WorkflowAction.APPROVE, ApprovalStage.COMMITTEE),
            (MemberStatus.PENDING_COMMITTEE_APPROVAL, WorkflowAction.SUBMIT, None),
            (MemberStatus.DRAFT, WorkflowAction.RESUBMIT, None),
        ],
    )
    def test_undefined_combinations(self, current, action, stage):
        with pytest.raises(InvalidTransitionError) as exc_info:
            transition(current, action, stage, comment="x")
        assert exc_info.value.from_status == current.value

    def test_unknown_action(self):
        with pytest.raises(InvalidTransitionError):
            transition(MemberStatus.DRAFT, "publish")

    def test_unknown_stage(self):
        with pytest.raises(InvalidTransitionError):
            transition(MemberStatus.PENDING_BOARD_APPROVAL, "approve", "ceo")

    @pytest.mark.parametrize("comment", [None, "", "   "])
    def test_reject_requires_comment(self, comment):
        with pytest.raises(FieldValidationError) as exc_info:
            transition(MemberStatus.PENDING_COMMITTEE_APPROVAL, WorkflowAction.REJECT, None, comment)
        assert "comment" in exc_info.value.errors

    def test_invalid_transition_checked_before_comment(self):
        with pytest.raises(InvalidTransitionError):
            transition(MemberStatus.ACTIVE, WorkflowAction.REJECT, None, None)


class TestApplyTransition:
    def _member(self, status: MemberStatus) -> Member:
        return Member(
            category=MemberCategory.VOTING,
            organisation_info=OrganisationInfo(company_name="Acme"),
            status=status,
            member_id="MEMBER-001",
        )

    def test_returns_updated_copy_and_entry(self):
        member = self._member(MemberStatus.PENDING_COMMITTEE_APPROVAL)

        outcome = apply_transition(
            member, WorkflowAction.APPROVE, ApprovalStage.COMMITTEE, "admin-1", None, NOW
        )

        assert outcome.member.status == MemberStatus.PENDING_BOARD_APPROVAL
        assert outcome.member.updated_at == NOW
        assert outcome.member.status_history == [outcome.entry]
        assert member.status == MemberStatus.PENDING_COMMITTEE_APPROVAL
        assert member.status_history == []

        entry = outcome.entry
        assert entry.actor_id == "admin-1"
        assert entry.timestamp == NOW
        assert entry.from_status == MemberStatus.PENDING_COMMITTEE_APPROVAL
        assert entry.to_status == MemberStatus.PENDING_BOARD_APPROVAL
        assert entry.stage == ApprovalStage.COMMITTEE

    def test_reject_stage_is_derived_from_status(self):
        member = self._member(MemberStatus.PENDING_BOARD_APPROVAL)

        outcome = apply_transition(member, WorkflowAction.REJECT, None, "admin-2", "  Missing licence ", NOW)

        assert outcome.entry.stage == ApprovalStage.BOARD
        assert outcome.entry.comment == "Missing licence"

    def test_submit_has_no_stage(self):
        outcome = apply_transition(
            self._member(MemberStatus.DRAFT), WorkflowAction.SUBMIT, None, "applicant", None, NOW
        )
        assert outcome.entry.stage is None
        assert outcome.entry.comment is None
