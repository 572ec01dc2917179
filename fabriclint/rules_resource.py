"""Rules that inspect top-level attributes and nested blocks of Fabric resources."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from .hcl import Traversal
from .linter import EvaluationError, Rule, Runner, Severity


def _try_string(runner: Runner, expr: Any) -> str | None:
    """Evaluate an expression to a string, or return None when it has no known value."""
    try:
        return runner.evaluate_string(expr)
    except EvaluationError:
        return None


def _check_allowed_value(
    rule: Rule,
    runner: Runner,
    resource_type: str,
    attribute: str,
    allowed: tuple[str, ...],
    label: str,
) -> None:
    for resource in runner.resources(resource_type):
        attr = resource.body.attributes.get(attribute)
        if attr is None:
            continue
        value = _try_string(runner, attr.expr)
        if value and value not in allowed:
            runner.emit_issue(
                rule,
                f"Invalid {label} '{value}'. Must be one of: {', '.join(allowed)}",
                attr.range,
            )


class FabricWorkspaceCapacity(Rule):
    """Workspaces should have a capacity assigned."""

    name = "fabric_workspace_capacity_required"
    severity = Severity.ERROR

    def check(self, runner: Runner) -> None:
        for resource in runner.resources("fabric_workspace"):
            if "capacity_id" not in resource.body.attributes:
                runner.emit_issue(
                    self,
                    "Workspace should have a capacity assigned for production use",
                    resource.def_range,
                )


class FabricDomainContributorsScope(Rule):
    """Domain contributors_scope must be a known value."""

    name = "fabric_domain_contributors_scope"
    severity = Severity.ERROR
    valid_scopes = ("AdminsOnly", "AllTenant", "SpecificUsersAndGroups")

    def check(self, runner: Runner) -> None:
        _check_allowed_value(
            self, runner, "fabric_domain", "contributors_scope", self.valid_scopes, "contributors_scope"
        )


class FabricWorkspaceRoleAssignmentRole(Rule):
    """Workspace role assignments must use a known role."""

    name = "fabric_workspace_role_assignment_role"
    severity = Severity.ERROR
    valid_roles = ("Admin", "Contributor", "Member", "Viewer")

    def check(self, runner: Runner) -> None:
        _check_allowed_value(
            self, runner, "fabric_workspace_role_assignment", "role", self.valid_roles, "workspace role"
        )


class FabricItemDescriptionRecommended(Rule):
    """Items should carry a non-empty description."""

    name = "fabric_item_description_recommended"
    severity = Severity.WARNING
    resource_types = (
        "fabric_activator",
        "fabric_copy_job",
        "fabric_data_pipeline",
        "fabric_dataflow",
        "fabric_deployment_pipeline",
        "fabric_digital_twin_builder",
        "fabric_domain",
        "fabric_eventhouse",
        "fabric_graphql_api",
        "fabric_kql_dashboard",
        "fabric_kql_database",
        "fabric_kql_queryset",
        "fabric_ml_experiment",
        "fabric_ml_model",
        "fabric_notebook",
        "fabric_spark_job_definition",
        "fabric_sql_database",
        "fabric_warehouse",
        "fabric_workspace",
    )

    def check(self, runner: Runner) -> None:
        for resource_type in self.resource_types:
            for resource in runner.resources(resource_type):
                attr = resource.body.attributes.get("description")
                if attr is None:
                    runner.emit_issue(
                        self,
                        "Adding a description improves documentation and governance of your "
                        "Fabric environment. Consider including the purpose, owner, and any "
                        "relevant business context.",
                        resource.def_range,
                    )
                elif _try_string(runner, attr.expr) == "":
                    runner.emit_issue(
                        self,
                        "Description is empty. Consider adding meaningful information about the "
                        "purpose, owner, and business context of this resource.",
                        attr.range,
                    )


def extract_resource_reference(expr: Any) -> str:
    """Return ``type.name`` for a reference such as ``fabric_workspace.example.id``, else ``""``."""
    if isinstance(expr, Traversal) and expr.steps:
        kind, value = expr.steps[0]
        if kind == "attr":
            return f"{expr.root}.{value}"
    return ""


@dataclass(frozen=True)
class _RoleTarget:
    resource_type: str
    role_assignment_type: str
    reference_attribute: str
    friendly_name: str
    display_name_attribute: str = "display_name"


class FabricRoleAssignmentRecommended(Rule):
    """Resources that support role assignments should have at least one."""

    name = "fabric_role_assignment_recommended"
    severity = Severity.WARNING
    targets = (
        _RoleTarget("fabric_workspace", "fabric_workspace_role_assignment", "workspace_id", "Workspace"),
        _RoleTarget(
            "fabric_deployment_pipeline",
            "fabric_deployment_pipeline_role_assignment",
            "deployment_pipeline_id",
            "Deployment pipeline",
        ),
        _RoleTarget("fabric_domain", "fabric_domain_role_assignment", "domain_id", "Domain"),
        _RoleTarget("fabric_gateway", "fabric_gateway_role_assignment", "gateway_id", "Gateway"),
    )

    def check(self, runner: Runner) -> None:
        for target in self.targets:
            self._check_target(runner, target)

    def _check_target(self, runner: Runner, target: _RoleTarget) -> None:
        referenced = {
            ref
            for block in runner.resources(target.role_assignment_type)
            if (attr := block.body.attributes.get(target.reference_attribute)) is not None
            if (ref := extract_resource_reference(attr.expr))
        }
        for block in runner.resources(target.resource_type):
            if f"{target.resource_type}.{block.labels[1]}" in referenced:
                continue
            display_name = ""
            attr = block.body.attributes.get(target.display_name_attribute)
            if attr is not None:
                display_name = _try_string(runner, attr.expr) or ""
            if display_name:
                subject = f"{target.friendly_name} '{display_name}' ({block.labels[0]})"
            else:
                subject = f"{target.friendly_name} '{block.labels[0]}'"
            runner.emit_issue(
                self,
                f"{subject} does not have any role assignments. "
                "This resource may not be accessible to users.",
                block.def_range,
            )


class FabricDeploymentPipelineStagesDisplayNameLength(Rule):
    """Deployment pipeline stage display names must not exceed 256 bytes."""

    name = "fabric_deployment_pipeline_stages_display_name_length"
    severity = Severity.ERROR
    max_length = 256

    def check(self, runner: Runner) -> None:
        for resource in runner.resources("fabric_deployment_pipeline"):
            for stage in resource.body.blocks_of_type("stages"):
                attr = stage.body.attributes.get("display_name")
                if attr is None:
                    continue
                value = _try_string(runner, attr.expr)
                if not value:
                    continue
                length = len(value.encode("utf-8"))
                if length > self.max_length:
                    runner.emit_issue(
                        self,
                        f"Stage display_name must not exceed {self.max_length} characters "
                        f"(current: {length})",
                        attr.range,
                    )