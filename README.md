# fabriclint

Lint rules for Terraform configurations that manage Microsoft Fabric
resources. `fabriclint` reads `.tf` files, finds Fabric resources and reports
configuration mistakes before they reach `terraform apply`.

## Installation

```
pip install .
```

For development, with the test dependencies:

```
pip install -e ".[test]"
pytest
```

## Linting Terraform files

```
fabriclint main.tf
fabriclint path/to/module
fabriclint --format json --force .
```

Arguments are files, or directories whose `*.tf` files are read; the default
is the current directory.

Options:

- `--format default` (the default) prints one line per finding:
  location, severity, message and rule name, followed by a count.
- `--format json` prints an object with an `issues` list (each with `rule`,
  `message`, `range` and `callers`) and an `errors` list.
- `--force` exits with 0 even when issues are found.

Exit status: 0 when there are no issues (or with `--force`), 2 when issues
were found, 1 when a file cannot be read or is not valid HCL.

### Values the rules can see

Rules look at literal values: strings, numbers, booleans, lists and objects.
References to `var.<name>` are resolved through the variable's `default`, and
`local.<name>` through `locals` blocks. Any other expression (function calls,
string templates, references to other resources) has no known value, and
checks that need the value skip it.

### Rules

Errors:

| Rule | Checks |
| --- | --- |
| `fabric_workspace_capacity_required` | `fabric_workspace` has a `capacity_id` |
| `fabric_domain_contributors_scope` | `contributors_scope` is `AdminsOnly`, `AllTenant` or `SpecificUsersAndGroups` |
| `fabric_workspace_role_assignment_role` | `role` is `Admin`, `Contributor`, `Member` or `Viewer` |
| `fabric_deployment_pipeline_stages_display_name_length` | stage `display_name` is at most 256 bytes |
| `fabric_workspace_git_provider_type_valid` | `git_provider_type` is `AzureDevOps` or `GitHub` |
| `fabric_workspace_git_azdo_attributes_required` | `organization_name` and `project_name` are set for Azure DevOps |
| `fabric_workspace_git_github_attributes_required` | `owner_name` is set for GitHub |
| `fabric_workspace_git_credentials_source` | `git_credentials.source` suits the provider type |
| `fabric_workspace_git_directory_name_format` | `directory_name` starts with `/` and is at most 256 bytes |
| `fabric_workspace_git_initialization_strategy_valid` | `initialization_strategy` is `PreferRemote` or `PreferWorkspace` |
| `fabric_workspace_git_string_lengths` | branch (250), repository (128), organization, owner and project (100) names stay within their limits |

Warnings:

| Rule | Checks |
| --- | --- |
| `fabric_item_description_recommended` | Fabric items carry a non-empty `description` |
| `fabric_role_assignment_recommended` | workspaces, deployment pipelines, domains and gateways are referenced by a role assignment |

### From Python

```python
from fabriclint.ruleset import all_rules, lint

for rule in all_rules():
    print(rule.name, rule.severity.value)

for issue in lint(["main.tf"]):
    print(issue.range, issue.rule, issue.message)
```

Lower-level pieces are available as well:

- `fabriclint.hcl.parse` and `fabriclint.hcl.parse_file` read HCL into
  `Body`, `Block` and `Attribute` objects; `Body.blocks_of_type` selects
  nested blocks. Invalid input raises `HCLSyntaxError`.
- `fabriclint.linter.load_runner` builds a `Runner` that any `Rule` can be
  checked against. `Runner.resources`, `Runner.evaluate_string` (which raises
  `EvaluationError` when a value is not known) and `Runner.emit_issue` are
  what rules use; findings collect in `Runner.issues`.

## Provider schema helpers

`fabriclint.provider_schema` reads the output of
`terraform providers schema -json` and keeps the Fabric provider's resource
schemas:

```python
from fabriclint.provider_schema import (
    extract_schema_constraints,
    extract_schema_enums,
    load_provider_schema,
)

schema = load_provider_schema("schema.json")
lengths = extract_schema_constraints(schema)  # {"fabric_workspace": {"display_name": 256, ...}}
enums = extract_schema_enums(schema)          # {"fabric_domain": {"contributors_scope": [...]}}
```

`extract_schema_constraints` picks up "String length must be at most N" from
attribute descriptions (nested block attributes appear as `block.attr`);
`extract_schema_enums` picks up the back-quoted values after "Value must be
one of :" on top-level attributes.

## What this package does not do

- It does not read the Fabric REST API specifications, and it has no command
  that writes mapping files or generates further rules from them. The rule
  set is the fixed list above.
- It is a standalone command, not a plugin for another linter.
- It does not evaluate Terraform expressions beyond the literals and
  `var`/`local` references described above.