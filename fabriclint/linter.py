"""Core linting types: rules, issues and the runner that gives rules access to configuration."""

from __future__ import annotations

import abc
import enum
from dataclasses import dataclass
from pathlib import Path
from typing import Any, ClassVar, Iterable

from .hcl import Block, Body, Range, Traversal, parse_file


class Severity(enum.Enum):
    ERROR = "error"
    WARNING = "warning"
    NOTICE = "notice"


@dataclass(frozen=True)
class Issue:
    rule: str
    severity: Severity
    message: str
    range: Range
    link: str = ""


class EvaluationError(Exception):
    """Raised when an expression has no statically known value."""


class Rule(abc.ABC):
    """Base class of all lint rules."""

    name: ClassVar[str] = ""
    enabled: ClassVar[bool] = True
    severity: ClassVar[Severity] = Severity.ERROR
    link: ClassVar[str] = ""

    @abc.abstractmethod
    def check(self, runner: "Runner") -> None:
        """Inspect the configuration and emit issues through the runner."""


class Runner:
    """Holds parsed configuration files and collects issues."""

    def __init__(self, bodies: Iterable[Body]):
        self.bodies = list(bodies)
        self.issues: list[Issue] = []
        self._variables: dict[str, Any] = {}
        self._locals: dict[str, Any] = {}
        for body in self.bodies:
            for block in body.blocks:
                if block.type == "variable" and len(block.labels) == 1:
                    default = block.body.attributes.get("default")
                    if default is not None:
                        self._variables[block.labels[0]] = default.expr
                elif block.type == "locals":
                    for name, attr in block.body.attributes.items():
                        self._locals[name] = attr.expr

    def resources(self, resource_type: str) -> list[Block]:
        """Return every ``resource`` block of the given type."""
        return [
            block
            for body in self.bodies
            for block in body.blocks
            if block.type == "resource" and len(block.labels) == 2 and block.labels[0] == resource_type
        ]

    def evaluate_string(self, expr: Any) -> str:
        """Evaluate an expression to a string, or raise EvaluationError."""
        value = self._value(expr, frozenset())
        if isinstance(value, bool):
            return "true" if value else "false"
        if isinstance(value, str):
            return value
        if isinstance(value, int):
            return str(value)
        if isinstance(value, float):
            return str(int(value)) if value.is_integer() else repr(value)
        if value is None:
            raise EvaluationError("value is null")
        raise EvaluationError("value is not a string")

    def emit_issue(self, rule: Rule, message: str, range: Range) -> None:
        self.issues.append(Issue(rule.name, rule.severity, message, range, rule.link))

    def _value(self, expr: Any, active: frozenset) -> Any:
        if isinstance(expr, Traversal):
            return self._resolve(expr, active)
        if expr is None or isinstance(expr, (str, bool, int, float)):
            return expr
        if isinstance(expr, list):
            return [self._value(item, active) for item in expr]
        if isinstance(expr, dict):
            return {key: self._value(item, active) for key, item in expr.items()}
        raise EvaluationError("expression cannot be evaluated statically")

    def _resolve(self, traversal: Traversal, active: frozenset) -> Any:
        tables = {"var": self._variables, "local": self._locals}
        table = tables.get(traversal.root)
        if table is None or not traversal.steps or traversal.steps[0][0] != "attr":
            raise EvaluationError(f"cannot evaluate reference {traversal}")
        name = traversal.steps[0][1]
        key = (traversal.root, name)
        if name not in table:
            raise EvaluationError(f"unknown value {traversal.root}.{name}")
        if key in active:
            raise EvaluationError(f"self-referencing value {traversal.root}.{name}")
        value = self._value(table[name], active | {key})
        for _, step in traversal.steps[1:]:
            try:
                value = value[step]
            except (KeyError, IndexError, TypeError) as exc:
                raise EvaluationError(f"cannot evaluate reference {traversal}") from exc
        return value


def load_runner(paths: Iterable[str | Path]) -> Runner:
    """Parse the given files, or every ``*.tf`` file in given directories."""
    files: list[Path] = []
    for entry in map(Path, paths):
        files.extend(sorted(entry.glob("*.tf")) if entry.is_dir() else [entry])
    return Runner(parse_file(path) for path in files)