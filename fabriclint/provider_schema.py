"""Loading of the Terraform provider schema and the constraints written in its descriptions."""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

FABRIC_PROVIDER = "registry.terraform.io/microsoft/fabric"

_LENGTH_PATTERN = re.compile(r"String length must be at most (\d+)")
_ENUM_PATTERN = re.compile(r"Value must be one of\s*:\s*([^.]+)")
_ENUM_VALUE_PATTERN = re.compile(r"`([^`]+)`")


def _mapping(value: Any) -> dict:
    return value if isinstance(value, dict) else {}


@dataclass
class SchemaAttribute:
    """One attribute of a resource or nested block in the provider schema."""

    type: Any = None
    description: str = ""
    sensitive: bool = False

    @classmethod
    def from_json(cls, data: Any) -> "SchemaAttribute":
        data = _mapping(data)
        description = data.get("description")
        return cls(
            type=data.get("type"),
            description=description if isinstance(description, str) else "",
            sensitive=data.get("sensitive") is True,
        )


@dataclass
class ResourceSchema:
    """The schema of a resource, or of a block nested in one."""

    attributes: dict[str, SchemaAttribute] = field(default_factory=dict)
    block_types: dict[str, "ResourceSchema"] = field(default_factory=dict)

    @classmethod
    def from_json(cls, data: Any) -> "ResourceSchema":
        block = _mapping(_mapping(data).get("block"))
        return cls(
            attributes={
                name: SchemaAttribute.from_json(attr)
                for name, attr in _mapping(block.get("attributes")).items()
            },
            block_types={
                name: cls.from_json(nested)
                for name, nested in _mapping(block.get("block_types")).items()
            },
        )


@dataclass
class ProviderSchema:
    """The resource schemas of the Fabric provider."""

    resource_schemas: dict[str, ResourceSchema] = field(default_factory=dict)

    @classmethod
    def from_json(cls, data: Any) -> "ProviderSchema":
        provider = _mapping(_mapping(_mapping(data).get("provider_schemas")).get(FABRIC_PROVIDER))
        return cls(
            resource_schemas={
                name: ResourceSchema.from_json(schema)
                for name, schema in _mapping(provider.get("resource_schemas")).items()
            }
        )


def load_provider_schema(path: str | Path) -> ProviderSchema:
    """Read the output of ``terraform providers schema -json`` and return the Fabric part."""
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError as exc:
        raise FileNotFoundError(
            f"Failed to read schema file {path}. Generate it first with: "
            "terraform providers schema -json > schema.json"
        ) from exc
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ValueError(f"Failed to parse schema JSON: {exc}") from exc
    return ProviderSchema.from_json(data)


def _max_length(description: str) -> int | None:
    match = _LENGTH_PATTERN.search(description)
    return int(match.group(1)) if match else None


def extract_schema_constraints(schema: ProviderSchema) -> dict[str, dict[str, int]]:
    """Map resource type to attribute (``block.attr`` for nested ones) to maximum length."""
    constraints: dict[str, dict[str, int]] = {}
    for resource_type, resource in schema.resource_schemas.items():
        found: dict[str, int] = {}
        for name, attr in resource.attributes.items():
            if (limit := _max_length(attr.description)) is not None:
                found[name] = limit
        for block_name, block in resource.block_types.items():
            for name, attr in block.attributes.items():
                if (limit := _max_length(attr.description)) is not None:
                    found[f"{block_name}.{name}"] = limit
        if found:
            constraints[resource_type] = found
    return constraints


def extract_schema_enums(schema: ProviderSchema) -> dict[str, dict[str, list[str]]]:
    """Map resource type to top-level attribute to the values its description allows."""
    enums: dict[str, dict[str, list[str]]] = {}
    for resource_type, resource in schema.resource_schemas.items():
        found: dict[str, list[str]] = {}
        for name, attr in resource.attributes.items():
            match = _ENUM_PATTERN.search(attr.description)
            if not match:
                continue
            values = _ENUM_VALUE_PATTERN.findall(match.group(1))
            if values:
                found[name] = values
        if found:
            enums[resource_type] = found
    return enums