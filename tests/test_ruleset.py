import json

from fabriclint.linter import Rule
from fabriclint.ruleset import all_rules, lint, main

CONFIG = """
resource "fabric_workspace" "example" {
  display_name = "demo"
}

resource "fabric_workspace_git" "example" {
  workspace_id = fabric_workspace.example.id
  git_provider_details {
    git_provider_type = "Bitbucket"
  }
}
"""


def write(tmp_path, text, name="main.tf"):
    path = tmp_path / name
    path.write_text(text, encoding="utf-8")
    return path


def test_all_rules_are_distinct_rule_instances():
    rules = all_rules()
    names = [rule.name for rule in rules]
    assert len(rules) == 13
    assert len(set(names)) == len(names)
    assert all(isinstance(rule, Rule) and rule.name for rule in rules)
    assert "fabric_workspace_git_provider_type_valid" in names
    assert "fabric_workspace_capacity_required" in names


def test_all_rules_returns_fresh_instances():
    first, second = all_rules(), all_rules()
    assert all(a is not b for a, b in zip(first, second))
    assert [r.name for r in first] == [r.name for r in second]


def test_lint_directory(tmp_path):
    write(tmp_path, CONFIG)
    issues = lint([tmp_path])
    rules = {issue.rule for issue in issues}
    assert "fabric_workspace_git_provider_type_valid" in rules
    assert "fabric_workspace_capacity_required" in rules
    assert "fabric_item_description_recommended" in rules
    assert "fabric_role_assignment_recommended" in rules


def test_lint_file_matches_directory(tmp_path):
    path = write(tmp_path, CONFIG)
    assert lint([path]) == lint([tmp_path])


def test_lint_empty_directory(tmp_path):
    assert lint([tmp_path]) == []


def test_main_reports_issues(tmp_path, capsys):
    write(tmp_path, CONFIG)
    code = main([str(tmp_path)])
    out = capsys.readouterr().out
    assert code == 2
    assert "Invalid git_provider_type 'Bitbucket'. Must be one of: AzureDevOps, GitHub" in out


def test_main_force_returns_zero(tmp_path, capsys):
    write(tmp_path, CONFIG)
    assert main(["--force", str(tmp_path)]) == 0
    assert "fabric_workspace_capacity_required" in capsys.readouterr().out


def test_main_json(tmp_path, capsys):
    write(tmp_path, CONFIG)
    code = main(["--format", "json", "--force", str(tmp_path)])
    data = json.loads(capsys.readouterr().out)
    assert code == 0
    assert data["errors"] == []
    assert len(data["issues"]) == len(lint([tmp_path]))
    provider = [i for i in data["issues"] if i["rule"]["name"] == "fabric_workspace_git_provider_type_valid"]
    assert provider[0]["rule"]["severity"] == "error"
    assert provider[0]["range"]["filename"].endswith("main.tf")


def test_main_clean_returns_zero(tmp_path, capsys):
    write(tmp_path, 'variable "x" {\n  default = "y"\n}\n')
    assert main([str(tmp_path)]) == 0
    assert capsys.readouterr().out == ""


def test_main_syntax_error(tmp_path, capsys):
    write(tmp_path, 'resource "fabric_workspace" "w" {\n')
    assert main([str(tmp_path)]) == 1
    assert "error:" in capsys.readouterr().err