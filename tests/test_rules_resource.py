import pytest

from fabriclint.hcl import parse
from fabriclint.linter import Runner, Severity
from fabriclint.rules_resource import (
    FabricDeploymentPipelineStagesDisplayNameLength,
    FabricDomainContributorsScope,
    FabricItemDescriptionRecommended,
    FabricRoleAssignmentRecommended,
    FabricWorkspaceCapacity,
    FabricWorkspaceRoleAssignmentRole,
    extract_resource_reference,
)


def run(rule, text):
    runner = Runner([parse(text, "main.tf")])
    rule.check(runner)
    return runner.issues


def test_workspace_without_capacity_is_flagged():
    issues = run(FabricWorkspaceCapacity(), 'resource "fabric_workspace" "ws" {\n  display_name = "x"\n}\n')
    assert [i.message for i in issues] == ["Workspace should have a capacity assigned for production use"]
    assert issues[0].rule == "fabric_workspace_capacity_required"
    assert issues[0].severity is Severity.ERROR
    assert issues[0].range.start_line == 1


def test_workspace_with_capacity_passes():
    text = 'resource "fabric_workspace" "ws" {\n  capacity_id = "abc"\n}\n'
    assert run(FabricWorkspaceCapacity(), text) == []


def test_invalid_contributors_scope():
    text = 'resource "fabric_domain" "d" {\n  contributors_scope = "Everyone"\n}\n'
    issues = run(FabricDomainContributorsScope(), text)
    assert [i.message for i in issues] == [
        "Invalid contributors_scope 'Everyone'. Must be one of: AdminsOnly, AllTenant, SpecificUsersAndGroups"
    ]
    assert issues[0].range.start_line == 2


@pytest.mark.parametrize("scope", ["AdminsOnly", "AllTenant", "SpecificUsersAndGroups", ""])
def test_valid_or_empty_contributors_scope(scope):
    text = f'resource "fabric_domain" "d" {{\n  contributors_scope = "{scope}"\n}}\n'
    assert run(FabricDomainContributorsScope(), text) == []


def test_unknown_scope_value_is_skipped():
    text = 'resource "fabric_domain" "d" {\n  contributors_scope = some_ref.value\n}\n'
    assert run(FabricDomainContributorsScope(), text) == []


def test_invalid_workspace_role_via_variable():
    text = (
        'variable "role" {\n  default = "Owner"\n}\n'
        'resource "fabric_workspace_role_assignment" "r" {\n  role = var.role\n}\n'
    )
    issues = run(FabricWorkspaceRoleAssignmentRole(), text)
    assert [i.message for i in issues] == [
        "Invalid workspace role 'Owner'. Must be one of: Admin, Contributor, Member, Viewer"
    ]


def test_valid_workspace_role():
    text = 'resource "fabric_workspace_role_assignment" "r" {\n  role = "Viewer"\n}\n'
    assert run(FabricWorkspaceRoleAssignmentRole(), text) == []


def test_description_missing_and_empty():
    text = (
        'resource "fabric_notebook" "n" {\n  display_name = "n"\n}\n'
        'resource "fabric_warehouse" "w" {\n  description = ""\n}\n'
        'resource "fabric_lakehouse" "l" {\n}\n'
    )
    issues = run(FabricItemDescriptionRecommended(), text)
    assert len(issues) == 2
    assert issues[0].message.startswith("Adding a description improves documentation")
    assert issues[0].range.start_line == 1
    assert issues[1].message.startswith("Description is empty.")
    assert issues[1].range.start_line == 5
    assert all(i.severity is Severity.WARNING for i in issues)


def test_description_present_passes():
    text = 'resource "fabric_workspace" "w" {\n  description = "Team workspace"\n}\n'
    assert run(FabricItemDescriptionRecommended(), text) == []


def test_extract_resource_reference():
    body = parse('a = fabric_workspace.example.id\nb = fabric_workspace.example\nc = "x"\nd = single\n')
    attrs = body.attributes
    assert extract_resource_reference(attrs["a"].expr) == "fabric_workspace.example"
    assert extract_resource_reference(attrs["b"].expr) == "fabric_workspace.example"
    assert extract_resource_reference(attrs["c"].expr) == ""
    assert extract_resource_reference(attrs["d"].expr) == ""


def test_role_assignment_present_suppresses_warning():
    text = (
        'resource "fabric_workspace" "example" {\n  display_name = "Team"\n}\n'
        'resource "fabric_workspace_role_assignment" "ra" {\n'
        "  workspace_id = fabric_workspace.example.id\n}\n"
    )
    assert run(FabricRoleAssignmentRecommended(), text) == []


def test_role_assignment_missing_with_display_name():
    text = 'resource "fabric_workspace" "example" {\n  display_name = "Team"\n}\n'
    issues = run(FabricRoleAssignmentRecommended(), text)
    assert [i.message for i in issues] == [
        "Workspace 'Team' (fabric_workspace) does not have any role assignments. "
        "This resource may not be accessible to users."
    ]


def test_role_assignment_missing_without_display_name():
    text = (
        'resource "fabric_gateway" "gw" {\n}\n'
        'resource "fabric_domain_role_assignment" "ra" {\n  domain_id = fabric_domain.other.id\n}\n'
        'resource "fabric_domain" "d" {\n}\n'
    )
    issues = run(FabricRoleAssignmentRecommended(), text)
    messages = [i.message for i in issues]
    assert messages == [
        "Domain 'fabric_domain' does not have any role assignments. "
        "This resource may not be accessible to users.",
        "Gateway 'fabric_gateway' does not have any role assignments. "
        "This resource may not be accessible to users.",
    ]


def test_stage_display_name_too_long():
    long_name = "s" * 257
    text = (
        'resource "fabric_deployment_pipeline" "p" {\n'
        f'  stages {{\n    display_name = "{long_name}"\n  }}\n'
        '  stages {\n    display_name = "Test"\n  }\n}\n'
    )
    issues = run(FabricDeploymentPipelineStagesDisplayNameLength(), text)
    assert [i.message for i in issues] == [
        "Stage display_name must not exceed 256 characters (current: 257)"
    ]
    assert issues[0].range.start_line == 3


def test_stage_display_name_at_limit_passes():
    text = (
        'resource "fabric_deployment_pipeline" "p" {\n'
        f'  stages {{\n    display_name = "{"s" * 256}"\n  }}\n}}\n'
    )
    assert run(FabricDeploymentPipelineStagesDisplayNameLength(), text) == []