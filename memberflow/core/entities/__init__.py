"""
Entités métier du workflow d'adhésion.

Exports :
- Member : Demande d'adhésion (profil, utilisateurs, consentements, historique)
- MemberStatus, MemberCategory, UserType : Énumérations du domaine
- WorkflowAction, ApprovalStage : Vocabulaire de la machine à états
- DropdownEntry, FieldDefinition, IdentityUser : Entrées des référentiels
"""

from memberflow.core.entities.member import (
    Address,
    ApprovalStage,
    Member,
    MemberCategory,
    MemberConsent,
    MemberStatus,
    MemberUser,
    OrganisationInfo,
    SocialLinks,
    StatusHistoryEntry,
    UserSnapshot,
    UserType,
    WorkflowAction,
)
from memberflow.core.entities.catalog import DropdownEntry, FieldDefinition, IdentityUser

__all__ = [
    "Address",
    "ApprovalStage",
    "Member",
    "MemberCategory",
    "MemberConsent",
    "MemberStatus",
    "MemberUser",
    "OrganisationInfo",
    "SocialLinks",
    "StatusHistoryEntry",
    "UserSnapshot",
    "UserType",
    "WorkflowAction",
    "DropdownEntry",
    "FieldDefinition",
    "IdentityUser",
]
