"""
Tests unitaires pour les commandes CLI.

Le Container est patche dans helpers.py (la ou @with_container() l'instancie)
et fournit l'orchestrateur et l'annuaire construits sur les fakes en memoire.
"""

import json
from unittest.mock import MagicMock, patch

import pytest
from typer.testing import CliRunner

from memberflow.core.entities.member import MemberStatus
from memberflow.main import app

runner = CliRunner()


@pytest.fixture
def mock_container(orchestrator, directory):
    """Container dont les services sont ceux des fixtures en memoire."""
    with patch("memberflow.adapters.cli.helpers.Container") as mock_cls:
        container_instance = MagicMock()
        mock_cls.return_value = container_instance
        container_instance.database.init = MagicMock()
        container_instance.orchestrator.return_value = orchestrator
        container_instance.directory_service.return_value = directory
        yield container_instance


@pytest.fixture
def payload_file(tmp_path):
    path = tmp_path / "acme.json"
    path.write_text(
        json.dumps({
            "category": "votingMember",
            "organisationInfo": {
                "companyName": "Acme Logistics",
                "typeOfTheOrganization": "privateCompany",
                "industries": ["logistics"],
                "websiteUrl": "acme-logistics.io",
                "organizationContactNumber": "+971 4 123 4567",
                "logoDocumentUpload": "uploads/acme/logo.png",
                "licenseDocumentUpload": "uploads/acme/licence.pdf",
                "addressLine1": "1 Harbour Road",
                "addressCity": "Dubai",
                "addressCountry": "United Arab Emirates",
            },
            "memberUsers": [
                {"email": "ceo@acme-logistics.io", "userType": "Primary",
                 "correspondanceUser": True},
            ],
            "consent": {
                "articleOfAssociationConsent": True,
                "articleOfAssociationCriteriaConsent": True,
                "authorizedPersonDeclaration": True,
            },
        }),
        encoding="utf-8",
    )
    return path


class TestCreateCommand:
    def test_creates_application(self, mock_container, payload_file, member_repository):
        result = runner.invoke(app, ["create", str(payload_file)])

        assert result.exit_code == 0, result.output
        assert "MEMBER-001" in result.output
        assert member_repository.members["MEMBER-001"].status == MemberStatus.PENDING_FORM_SUBMISSION
        mock_container.database.init.assert_called_once()

    def test_draft_option(self, mock_container, payload_file, member_repository):
        result = runner.invoke(app, ["create", str(payload_file), "--draft"])

        assert result.exit_code == 0, result.output
        assert member_repository.members["MEMBER-001"].status == MemberStatus.DRAFT

    def test_validation_errors_are_listed(self, mock_container, tmp_path, member_repository):
        path = tmp_path / "empty.json"
        path.write_text(json.dumps({"category": "votingMember", "memberUsers": []}))

        result = runner.invoke(app, ["create", str(path)])

        assert result.exit_code == 1
        assert "companyName" in result.output
        assert member_repository.members == {}

    def test_invalid_file(self, mock_container, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("not json")

        result = runner.invoke(app, ["create", str(path)])

        assert result.exit_code == 1
        assert "Fichier invalide" in result.output


class TestWorkflowCommands:
    def test_submit_and_show(self, mock_container, payload_file):
        runner.invoke(app, ["create", str(payload_file)])

        result = runner.invoke(app, ["transition", "MEMBER-001", "submit", "--actor", "applicant-1"])
        assert result.exit_code == 0, result.output
        assert "pendingCommitteeApproval" in result.output

        result = runner.invoke(app, ["show", "APP-001"])
        assert result.exit_code == 0, result.output
        assert "Acme Logistics" in result.output

    def test_invalid_transition(self, mock_container, payload_file):
        runner.invoke(app, ["create", str(payload_file)])

        result = runner.invoke(
            app, ["transition", "MEMBER-001", "approve", "--stage", "board", "--actor", "a"]
        )

        assert result.exit_code == 1
        assert "Transition not allowed" in result.output

    def test_show_unknown(self, mock_container):
        result = runner.invoke(app, ["show", "MEMBER-404"])
        assert result.exit_code == 1
        assert "not found" in result.output

    def test_applications_empty(self, mock_container):
        result = runner.invoke(app, ["applications"])
        assert result.exit_code == 0
        assert "Aucune demande" in result.output

    def test_retire_with_confirmation(self, mock_container, payload_file, member_repository):
        runner.invoke(app, ["create", str(payload_file)])

        result = runner.invoke(app, ["retire", "MEMBER-001"], input="y\n")

        assert result.exit_code == 0, result.output
        assert member_repository.members["MEMBER-001"].deleted_at is not None

    def test_retire_aborted(self, mock_container, payload_file, member_repository):
        runner.invoke(app, ["create", str(payload_file)])

        result = runner.invoke(app, ["retire", "MEMBER-001"], input="n\n")

        assert result.exit_code == 0
        assert member_repository.members["MEMBER-001"].deleted_at is None


class TestDirectoryCommands:
    def test_map_data_without_members(self, mock_container):
        result = runner.invoke(app, ["map-data", "--action", "view-member"])

        assert result.exit_code == 0, result.output
        assert "0 / 0" in result.output
