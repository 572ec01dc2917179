"""The Fabric rule set and a command-line front end for it."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Iterable, Sequence

from .hcl import HCLSyntaxError, Range
from .linter import Issue, Rule, load_runner
from .rules_git import (
    FabricWorkspaceGitAzureDevOpsAttributes,
    FabricWorkspaceGitCredentialsSource,
    FabricWorkspaceGitDirectoryName,
    FabricWorkspaceGitGitHubAttributes,
    FabricWorkspaceGitInitializationStrategy,
    FabricWorkspaceGitProviderType,
    FabricWorkspaceGitStringLengths,
)
from .rules_resource import (
    FabricDeploymentPipelineStagesDisplayNameLength,
    FabricDomainContributorsScope,
    FabricItemDescriptionRecommended,
    FabricRoleAssignmentRecommended,
    FabricWorkspaceCapacity,
    FabricWorkspaceRoleAssignmentRole,
)

_RULE_CLASSES: tuple[type[Rule], ...] = (
    FabricDeploymentPipelineStagesDisplayNameLength,
    FabricDomainContributorsScope,
    FabricItemDescriptionRecommended,
    FabricRoleAssignmentRecommended,
    FabricWorkspaceCapacity,
    FabricWorkspaceGitAzureDevOpsAttributes,
    FabricWorkspaceGitCredentialsSource,
    FabricWorkspaceGitDirectoryName,
    FabricWorkspaceGitGitHubAttributes,
    FabricWorkspaceGitInitializationStrategy,
    FabricWorkspaceGitProviderType,
    FabricWorkspaceGitStringLengths,
    FabricWorkspaceRoleAssignmentRole,
)


def all_rules() -> list[Rule]:
    """Return a fresh instance of every rule in the set."""
    return [cls() for cls in _RULE_CLASSES]


def lint(paths: Iterable[str | Path]) -> list[Issue]:
    """Run every enabled rule over the given files or directories."""
    runner = load_runner(paths)
    for rule in all_rules():
        if rule.enabled:
            rule.check(runner)
    return runner.issues


def _range_json(rng: Range) -> dict:
    return {
        "filename": rng.filename,
        "start": {"line": rng.start_line, "column": rng.start_column},
        "end": {"line": rng.end_line, "column": rng.end_column},
    }


def _issue_json(issue: Issue) -> dict:
    return {
        "rule": {"name": issue.rule, "severity": issue.severity.value, "link": issue.link},
        "message": issue.message,
        "range": _range_json(issue.range),
        "callers": [],
    }


def main(argv: Sequence[str] | None = None) -> int:
    parser = argparse.ArgumentParser(prog="fabriclint", description="Lint Microsoft Fabric Terraform configuration.")
    parser.add_argument("paths", nargs="*", default=["."], help="files or directories to lint")
    parser.add_argument("--format", choices=("default", "json"), default="default")
    parser.add_argument("--force", action="store_true", help="exit with 0 even when issues are found")
    args = parser.parse_args(argv)

    try:
        issues = lint(args.paths)
    except (HCLSyntaxError, OSError) as exc:
        if args.format == "json":
            print(json.dumps({"issues": [], "errors": [{"message": str(exc)}]}, indent=2))
        else:
            print(f"error: {exc}", file=sys.stderr)
        return 1

    if args.format == "json":
        print(json.dumps({"issues": [_issue_json(i) for i in issues], "errors": []}, indent=2))
    else:
        for issue in issues:
            print(f"{issue.range}: {issue.severity.value}: {issue.message} ({issue.rule})")
        if issues:
            print(f"{len(issues)} issue(s) found")

    if issues and not args.force:
        return 2
    return 0