import json

import pytest

from fabriclint.provider_schema import (
    FABRIC_PROVIDER,
    ProviderSchema,
    extract_schema_constraints,
    extract_schema_enums,
    load_provider_schema,
)


def _schema_document():
    return {
        "provider_schemas": {
            FABRIC_PROVIDER: {
                "resource_schemas": {
                    "fabric_workspace": {
                        "block": {
                            "attributes": {
                                "display_name": {
                                    "type": "string",
                                    "description": "The name. String length must be at most 256.",
                                },
                                "role": {
                                    "type": "string",
                                    "description": "Value must be one of : `Admin`, `Member`, `Viewer`.",
                                },
                                "secret_value": {"type": "string", "sensitive": True},
                            },
                            "block_types": {
                                "git": {
                                    "nesting_mode": "single",
                                    "block": {
                                        "attributes": {
                                            "branch_name": {
                                                "type": "string",
                                                "description": "String length must be at most 250.",
                                            }
                                        }
                                    },
                                }
                            },
                        }
                    },
                    "fabric_plain": {
                        "block": {"attributes": {"id": {"type": "string", "description": "Id."}}}
                    },
                }
            }
        }
    }


@pytest.fixture
def schema(tmp_path):
    path = tmp_path / "schema.json"
    path.write_text(json.dumps(_schema_document()), encoding="utf-8")
    return load_provider_schema(path)


def test_load_reads_resources_and_blocks(schema):
    workspace = schema.resource_schemas["fabric_workspace"]
    assert set(schema.resource_schemas) == {"fabric_workspace", "fabric_plain"}
    assert workspace.attributes["display_name"].type == "string"
    assert workspace.attributes["secret_value"].sensitive is True
    assert workspace.attributes["display_name"].sensitive is False
    assert "branch_name" in workspace.block_types["git"].attributes


def test_extract_constraints(schema):
    assert extract_schema_constraints(schema) == {
        "fabric_workspace": {"display_name": 256, "git.branch_name": 250}
    }


def test_extract_enums(schema):
    assert extract_schema_enums(schema) == {
        "fabric_workspace": {"role": ["Admin", "Member", "Viewer"]}
    }


def test_other_providers_are_ignored():
    schema = ProviderSchema.from_json(
        {"provider_schemas": {"registry.terraform.io/other/x": {"resource_schemas": {"a": {}}}}}
    )
    assert schema.resource_schemas == {}


def test_missing_file_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_provider_schema(tmp_path / "absent.json")


def test_invalid_json_raises(tmp_path):
    path = tmp_path / "schema.json"
    path.write_text("{not json", encoding="utf-8")
    with pytest.raises(ValueError):
        load_provider_schema(path)


def test_enum_without_backticks_is_skipped():
    schema = ProviderSchema.from_json(
        {
            "provider_schemas": {
                FABRIC_PROVIDER: {
                    "resource_schemas": {
                        "fabric_x": {
                            "block": {
                                "attributes": {
                                    "kind": {"description": "Value must be one of : A, B."}
                                }
                            }
                        }
                    }
                }
            }
        }
    )
    assert extract_schema_enums(schema) == {}