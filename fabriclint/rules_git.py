"""Rules that validate ``fabric_workspace_git`` resources."""

from __future__ import annotations

from typing import Iterator

from .hcl import Block
from .linter import Rule, Runner, Severity
from .rules_resource import _check_allowed_value, _try_string

_GIT_RESOURCE = "fabric_workspace_git"
_PROVIDER_BLOCK = "git_provider_details"
_CREDENTIALS_BLOCK = "git_credentials"


def _provider_blocks(runner: Runner) -> Iterator[Block]:
    for resource in runner.resources(_GIT_RESOURCE):
        yield from resource.body.blocks_of_type(_PROVIDER_BLOCK)


def _provider_type(runner: Runner, block: Block) -> str:
    """Return the evaluated git_provider_type of a block, or ``""`` when unknown."""
    attr = block.body.attributes.get("git_provider_type")
    if attr is None:
        return ""
    return _try_string(runner, attr.expr) or ""


def _check_required(rule: Rule, runner: Runner, provider: str, required: tuple[str, ...]) -> None:
    for block in _provider_blocks(runner):
        if _provider_type(runner, block) != provider:
            continue
        for name in required:
            if name not in block.body.attributes:
                runner.emit_issue(
                    rule,
                    f"{name} is required when git_provider_type is '{provider}'",
                    block.def_range,
                )


class FabricWorkspaceGitAzureDevOpsAttributes(Rule):
    """Azure DevOps connections need an organization and a project."""

    name = "fabric_workspace_git_azdo_attributes_required"
    severity = Severity.ERROR
    required = ("organization_name", "project_name")

    def check(self, runner: Runner) -> None:
        _check_required(self, runner, "AzureDevOps", self.required)


class FabricWorkspaceGitGitHubAttributes(Rule):
    """GitHub connections need an owner."""

    name = "fabric_workspace_git_github_attributes_required"
    severity = Severity.ERROR
    required = ("owner_name",)

    def check(self, runner: Runner) -> None:
        _check_required(self, runner, "GitHub", self.required)


class FabricWorkspaceGitCredentialsSource(Rule):
    """git_credentials.source must suit the git provider type."""

    name = "fabric_workspace_git_credentials_source"
    severity = Severity.ERROR
    valid_sources = {
        "GitHub": ("ConfiguredConnection",),
        "AzureDevOps": ("ConfiguredConnection", "Automatic"),
    }

    def check(self, runner: Runner) -> None:
        for resource in runner.resources(_GIT_RESOURCE):
            providers = resource.body.blocks_of_type(_PROVIDER_BLOCK)
            provider_type = _provider_type(runner, providers[0]) if providers else ""
            credentials = resource.body.blocks_of_type(_CREDENTIALS_BLOCK)
            if not credentials:
                continue
            attr = credentials[0].body.attributes.get("source")
            if attr is None:
                continue
            source = _try_string(runner, attr.expr)
            if not source:
                continue
            allowed = self.valid_sources.get(provider_type)
            if allowed is None or source in allowed:
                continue
            runner.emit_issue(
                self,
                f"Invalid git_credentials.source '{source}' for git_provider_type "
                f"'{provider_type}'. Must be one of: {', '.join(allowed)}",
                attr.range,
            )


class FabricWorkspaceGitDirectoryName(Rule):
    """directory_name must start with '/' and stay within 256 bytes."""

    name = "fabric_workspace_git_directory_name_format"
    severity = Severity.ERROR
    max_length = 256

    def check(self, runner: Runner) -> None:
        for block in _provider_blocks(runner):
            attr = block.body.attributes.get("directory_name")
            if attr is None:
                continue
            directory = _try_string(runner, attr.expr)
            if not directory:
                continue
            if not directory.startswith("/"):
                runner.emit_issue(
                    self, "directory_name must start with forward slash '/'", attr.range
                )
            length = len(directory.encode("utf-8"))
            if length > self.max_length:
                runner.emit_issue(
                    self,
                    f"directory_name must not exceed {self.max_length} characters "
                    f"(current: {length})",
                    attr.range,
                )


class FabricWorkspaceGitInitializationStrategy(Rule):
    """initialization_strategy must be a known value."""

    name = "fabric_workspace_git_initialization_strategy_valid"
    severity = Severity.ERROR
    valid_strategies = ("PreferRemote", "PreferWorkspace")

    def check(self, runner: Runner) -> None:
        _check_allowed_value(
            self,
            runner,
            _GIT_RESOURCE,
            "initialization_strategy",
            self.valid_strategies,
            "initialization_strategy",
        )


class FabricWorkspaceGitProviderType(Rule):
    """git_provider_type must be AzureDevOps or GitHub."""

    name = "fabric_workspace_git_provider_type_valid"
    severity = Severity.ERROR
    valid_providers = ("AzureDevOps", "GitHub")

    def check(self, runner: Runner) -> None:
        for block in _provider_blocks(runner):
            attr = block.body.attributes.get("git_provider_type")
            if attr is None:
                continue
            provider = _try_string(runner, attr.expr)
            if provider and provider not in self.valid_providers:
                runner.emit_issue(
                    self,
                    f"Invalid git_provider_type '{provider}'. Must be one of: "
                    f"{', '.join(self.valid_providers)}",
                    attr.range,
                )


class FabricWorkspaceGitStringLengths(Rule):
    """git_provider_details string attributes must respect their maximum lengths."""

    name = "fabric_workspace_git_string_lengths"
    severity = Severity.ERROR
    max_lengths = {
        "branch_name": 250,
        "repository_name": 128,
        "organization_name": 100,
        "owner_name": 100,
        "project_name": 100,
    }

    def check(self, runner: Runner) -> None:
        for block in _provider_blocks(runner):
            for attr_name, limit in self.max_lengths.items():
                attr = block.body.attributes.get(attr_name)
                if attr is None:
                    continue
                value = _try_string(runner, attr.expr)
                if not value:
                    continue
                length = len(value.encode("utf-8"))
                if length > limit:
                    runner.emit_issue(
                        self,
                        f"{attr_name} must not exceed {limit} characters (current: {length})",
                        attr.range,
                    )