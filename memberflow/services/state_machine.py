"""
Machine a etats du statut des demandes d'adhesion.

Fonctions pures : aucune lecture ni ecriture, aucune horloge implicite.
L'orchestrateur se charge de la persistance conditionnelle.

Transitions :
    draft | pendingFormSubmission    --submit-->          pendingCommitteeApproval
    pendingCommitteeApproval         --approve/committee-> pendingBoardApproval
    pendingBoardApproval             --approve/board-->    active
    pendingCommitteeApproval | pendingBoardApproval --reject--> rejected
    rejected                         --resubmit-->        pendingFormSubmission
"""

from dataclasses import dataclass, replace
from datetime import datetime
from typing import Optional

from memberflow.core.entities.member import (
    ApprovalStage,
    Member,
    MemberStatus,
    StatusHistoryEntry,
    WorkflowAction,
)
from memberflow.core.errors import (
    FieldError,
    FieldErrorKind,
    FieldValidationError,
    InvalidTransitionError,
)


# (statut courant, action, etape) -> nouveau statut ; etape None = toute etape
TRANSITIONS: dict[tuple[MemberStatus, WorkflowAction, Optional[ApprovalStage]], MemberStatus] = {
    (MemberStatus.DRAFT, WorkflowAction.SUBMIT, None): MemberStatus.PENDING_COMMITTEE_APPROVAL,
    (MemberStatus.PENDING_FORM_SUBMISSION, WorkflowAction.SUBMIT, None):
        MemberStatus.PENDING_COMMITTEE_APPROVAL,
    (MemberStatus.PENDING_COMMITTEE_APPROVAL, WorkflowAction.APPROVE, ApprovalStage.COMMITTEE):
        MemberStatus.PENDING_BOARD_APPROVAL,
    (MemberStatus.PENDING_BOARD_APPROVAL, WorkflowAction.APPROVE, ApprovalStage.BOARD):
        MemberStatus.ACTIVE,
    (MemberStatus.PENDING_COMMITTEE_APPROVAL, WorkflowAction.REJECT, None): MemberStatus.REJECTED,
    (MemberStatus.PENDING_BOARD_APPROVAL, WorkflowAction.REJECT, None): MemberStatus.REJECTED,
    (MemberStatus.REJECTED, WorkflowAction.RESUBMIT, None): MemberStatus.PENDING_FORM_SUBMISSION,
}

# Etape implicite de l'audit selon le statut de depart
_STAGE_BY_STATUS = {
    MemberStatus.PENDING_COMMITTEE_APPROVAL: ApprovalStage.COMMITTEE,
    MemberStatus.PENDING_BOARD_APPROVAL: ApprovalStage.BOARD,
}


@dataclass(frozen=True)
class TransitionOutcome:
    """Demande mise a jour et entree d'historique a persister ensemble."""

    member: Member
    entry: StatusHistoryEntry


def transition(
    current: MemberStatus,
    action: WorkflowAction,
    stage: Optional[ApprovalStage] = None,
    comment: Optional[str] = None,
) -> MemberStatus:
    """
    Calcule le statut suivant.

    Args:
        current: Statut courant
        action: Action demandee
        stage: Niveau d'approbation (obligatoire pour approve)
        comment: Note de revue (obligatoire pour reject)

    Returns:
        Le nouveau statut

    Raises:
        InvalidTransitionError: Combinaison non definie
        FieldValidationError: Rejet sans commentaire
    """
    try:
        action = WorkflowAction(action)
        stage = ApprovalStage(stage) if stage is not None else None
    except ValueError:
        raise InvalidTransitionError(
            MemberStatus(current).value,
            str(getattr(action, "value", action)),
            str(getattr(stage, "value", stage)) if stage is not None else None,
        ) from None

    target = TRANSITIONS.get((current, action, stage))
    if target is None:
        target = TRANSITIONS.get((current, action, None))
    if target is None:
        raise InvalidTransitionError(
            MemberStatus(current).value, action.value, stage.value if stage else None
        )

    if action == WorkflowAction.REJECT and not (comment or "").strip():
        raise FieldValidationError({
            "comment": FieldError(
                FieldErrorKind.REQUIRED, "A review comment is required to reject an application"
            )
        })
    return target


def apply_transition(
    member: Member,
    action: WorkflowAction,
    stage: Optional[ApprovalStage],
    actor_id: str,
    comment: Optional[str],
    now: datetime,
) -> TransitionOutcome:
    """
    Applique une transition a une copie de la demande.

    La demande fournie n'est pas modifiee. L'entree d'historique porte
    l'etape fournie, ou celle deduite du statut de depart.
    """
    target = transition(member.status, action, stage, comment)

    audit_stage = ApprovalStage(stage) if stage is not None else _STAGE_BY_STATUS.get(member.status)
    entry = StatusHistoryEntry(
        actor_id=actor_id,
        timestamp=now,
        from_status=member.status,
        to_status=target,
        action=WorkflowAction(action),
        stage=audit_stage,
        comment=(comment or "").strip() or None,
    )
    updated = replace(
        member,
        status=target,
        status_history=[*member.status_history, entry],
        updated_at=now,
    )
    return TransitionOutcome(member=updated, entry=entry)
