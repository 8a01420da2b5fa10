"""
Tests for todotrack.cli module.

The CLI is exercised end to end with click's CliRunner against the shared
sample tree. Each test changes into the tree so paths are printed relative.

Coverage targets:
- list / stat output and exit codes
- lint exit codes and report
- fmt and mod rewrites, --dry-run
- Configuration errors reported before any file is touched
"""
from __future__ import annotations

import json
import os
from pathlib import Path

import pytest
from click.testing import CliRunner

from todotrack import __version__
from todotrack.cli import main


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture
def in_tree(tmp_tree: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Run commands from inside the sample tree."""
    monkeypatch.chdir(tmp_tree)
    return tmp_tree


# =============================================================================
# list / stat
# =============================================================================

class TestList:
    """Tests for the list command."""

    def test_default_command_lists_everything(self, runner: CliRunner, in_tree: Path):
        result = runner.invoke(main, [])

        assert result.exit_code == 0
        assert result.output.splitlines() == [
            "app.py:3 [#12, @alice, due:2024-06-01] handle missing files",
            "app.py:5 validate the path",
            "app.py:10 [@bob] evict old entries",
            "src/main.c:4 [ABC-7] return a real status",
            "src/main.c:5 [@carol] print usage",
        ]

    def test_filters(self, runner: CliRunner, in_tree: Path):
        result = runner.invoke(main, ["list", "--assignee", "bob", "--assignee", "carol"])

        assert result.exit_code == 0
        assert len(result.output.splitlines()) == 2

    def test_untracked_and_unassigned(self, runner: CliRunner, in_tree: Path):
        result = runner.invoke(main, ["list", "--untracked", "--unassigned"])

        assert result.output.splitlines() == ["app.py:5 validate the path"]

    def test_overdue(self, runner: CliRunner, in_tree: Path):
        result = runner.invoke(main, ["list", "--overdue"])

        assert result.output.splitlines() == [
            "app.py:3 [#12, @alice, due:2024-06-01] handle missing files",
        ]

    def test_no_results_exits_1(self, runner: CliRunner, in_tree: Path):
        result = runner.invoke(main, ["list", "--assignee", "nobody"])

        assert result.exit_code == 1
        assert result.output.strip() == "<no TODOs>"

    def test_json_format(self, runner: CliRunner, in_tree: Path):
        result = runner.invoke(main, ["list", "--format", "json", "--issue", "ABC-7"])

        data = json.loads(result.output)
        assert data["summary"]["total"] == 1
        assert data["todos"][0]["file"] == os.path.join("src", "main.c")

    def test_explicit_path(self, runner: CliRunner, tmp_tree: Path):
        result = runner.invoke(main, ["--path", str(tmp_tree / "src"), "list"])

        assert result.exit_code == 0
        assert len(result.output.splitlines()) == 2

    def test_missing_path_is_an_error(self, runner: CliRunner, tmp_path: Path):
        result = runner.invoke(main, ["--path", str(tmp_path / "nope"), "list"])

        assert result.exit_code == 1
        assert "Error:" in result.output
        assert "No such file or directory" in result.output

    def test_hidden_and_no_ignore(self, runner: CliRunner, in_tree: Path):
        result = runner.invoke(main, ["--hidden", "--no-ignore", "-j", "2", "list"])

        assert "build/out.py:1 generated" in result.output
        assert ".hidden.py:1 secret" in result.output


class TestStat:
    """Tests for the stat command."""

    def test_bare_count(self, runner: CliRunner, in_tree: Path):
        result = runner.invoke(main, ["stat"])

        assert result.exit_code == 0
        assert result.output.strip() == "5"

    def test_group_by_assignee(self, runner: CliRunner, in_tree: Path):
        result = runner.invoke(main, ["stat", "--group-by", "assignee"])

        lines = result.output.splitlines()
        assert lines[0] == "<unassigned>: 2"
        assert set(lines[1:]) == {"alice: 1", "bob: 1", "carol: 1"}

    def test_group_by_with_filter(self, runner: CliRunner, in_tree: Path):
        result = runner.invoke(main, ["stat", "--group-by", "issue", "--unassigned"])

        assert set(result.output.splitlines()) == {"<untracked>: 1", "ABC-7: 1"}

    def test_unsupported_group_by(self, runner: CliRunner, in_tree: Path):
        result = runner.invoke(main, ["stat", "--group-by", "owner"])

        assert result.exit_code == 1
        assert "Error: --group-by=owner not supported" in result.output

    def test_no_matches_exits_1(self, runner: CliRunner, in_tree: Path):
        result = runner.invoke(main, ["stat", "--assignee", "nobody"])

        assert result.exit_code == 1
        assert result.output.strip() == "0"

    def test_no_matches_grouped_exits_1(self, runner: CliRunner, in_tree: Path):
        result = runner.invoke(main, ["stat", "--assignee", "nobody", "--group-by", "due"])

        assert result.exit_code == 1
        assert result.output.strip() == "<no TODOs>"


# =============================================================================
# lint
# =============================================================================

class TestLint:
    """Tests for the lint command."""

    def test_reports_violations(self, runner: CliRunner, in_tree: Path):
        result = runner.invoke(main, ["lint"])

        assert result.exit_code == 1
        assert "app.py:10 [@bob] evict old entries\n  - Invalid format" in result.output
        assert "1 TODO with lint violations" in result.output

    def test_rule_flags(self, runner: CliRunner, in_tree: Path):
        result = runner.invoke(main, [
            "lint", "--require-issues", "--issue-format", "numbered",
            "--allowed-assignees", "alice",
        ])

        assert result.exit_code == 1
        assert "  - Missing issue" in result.output
        assert "  - Invalid issue format" in result.output
        assert "  - Invalid assignee" in result.output

    def test_rules_from_config_file(self, runner: CliRunner, in_tree: Path):
        (in_tree / ".todotrack.yaml").write_text("lint:\n  require-due-dates: true\n")

        result = runner.invoke(main, ["lint"])

        assert "  - Missing due date" in result.output

    def test_clean_after_fmt(self, runner: CliRunner, in_tree: Path):
        assert runner.invoke(main, ["fmt"]).exit_code == 0

        result = runner.invoke(main, ["lint"])

        assert result.exit_code == 0
        assert "No TODO formatting errors found. Great job!" in result.output


# =============================================================================
# fmt / mod
# =============================================================================

class TestRewriteCommands:
    """Tests for fmt and the mod subcommands."""

    def test_fmt(self, runner: CliRunner, in_tree: Path):
        result = runner.invoke(main, ["fmt"])

        assert result.exit_code == 0
        assert "1 files changed" in result.output
        assert "    # TODO(@bob): evict old entries\n" in (in_tree / "app.py").read_text()

    def test_fmt_dry_run_writes_nothing(self, runner: CliRunner, in_tree: Path):
        before = (in_tree / "app.py").read_text()

        result = runner.invoke(main, ["fmt", "--dry-run"])

        assert result.exit_code == 0
        assert "+    # TODO(@bob): evict old entries" in result.output
        assert "[DRY RUN]" in result.output
        assert (in_tree / "app.py").read_text() == before

    def test_rename_assignee(self, runner: CliRunner, in_tree: Path):
        result = runner.invoke(main, ["mod", "rename-assignee", "--from", "alice", "--to", "al"])

        assert result.exit_code == 0
        assert "# TODO(#12, @al, 2024-06-01): handle missing files\n" in (
            in_tree / "app.py"
        ).read_text()

    def test_assign_issue(self, runner: CliRunner, in_tree: Path):
        runner.invoke(main, ["mod", "assign-issue", "--issue", "ABC-7", "--assignee", "dev"])

        assert "    // TODO(ABC-7, @dev): return a real status\n" in (
            in_tree / "src" / "main.c"
        ).read_text()

    def test_block_comment_rewrite_keeps_closer(self, runner: CliRunner, in_tree: Path):
        runner.invoke(main, ["mod", "add-missing-due-dates", "--date", "2030-01-01"])

        assert "    /* TODO(@carol, 2030-01-01): print usage */\n" in (
            in_tree / "src" / "main.c"
        ).read_text()

    def test_no_matches_leaves_files_untouched(self, runner: CliRunner, in_tree: Path):
        app = in_tree / "app.py"
        os.utime(app, (1_000_000, 1_000_000))

        result = runner.invoke(main, ["mod", "remove-assignee", "--assignee", "nobody"])

        assert result.exit_code == 0
        assert 'No TODOs assigned to "nobody"' in result.output
        assert app.stat().st_mtime == 1_000_000

    def test_invalid_replacement_issue(self, runner: CliRunner, in_tree: Path):
        before = (in_tree / "app.py").read_text()

        result = runner.invoke(main, ["mod", "rename-issue", "--from", "#12", "--to", "bogus"])

        assert result.exit_code == 1
        assert 'Error: Invalid replacement issue "bogus"' in result.output
        assert (in_tree / "app.py").read_text() == before

    def test_invalid_date(self, runner: CliRunner, in_tree: Path):
        result = runner.invoke(main, ["mod", "set-issue-due-date", "--issue", "#12", "--date", "2024-02-30"])

        assert result.exit_code == 1
        assert "Invalid due date" in result.output

    def test_invalid_assignee_touches_nothing(self, runner: CliRunner, in_tree: Path):
        before = (in_tree / "app.py").read_bytes()

        result = runner.invoke(main, ["mod", "assign-unassigned", "--assignee", "al, #9)"])

        assert result.exit_code == 1
        assert 'Error: Invalid assignee "al, #9)"' in result.output
        assert (in_tree / "app.py").read_bytes() == before

    def test_symlinked_file_is_left_alone(self, runner: CliRunner, in_tree: Path):
        outside = in_tree / "build" / "shared.py"  # ignored via .gitignore
        outside.write_text("# TODO(@bob): shared\n")
        (in_tree / "link.py").symlink_to(outside)

        result = runner.invoke(main, ["mod", "rename-assignee", "--from", "bob", "--to", "robert"])

        assert result.exit_code == 0
        assert (in_tree / "link.py").is_symlink()
        assert outside.read_text() == "# TODO(@bob): shared\n"

    def test_mod_dry_run(self, runner: CliRunner, in_tree: Path):
        before = (in_tree / "app.py").read_text()

        result = runner.invoke(main, ["mod", "remove-all-issues", "--dry-run"])

        assert result.exit_code == 0
        assert "-# TODO(#12, @alice, 2024-06-01): handle missing files" in result.output
        assert (in_tree / "app.py").read_text() == before


class TestMisc:
    """Tests for global options."""

    def test_version(self, runner: CliRunner):
        result = runner.invoke(main, ["--version"])

        assert __version__ in result.output

    def test_bad_config_file(self, runner: CliRunner, in_tree: Path):
        (in_tree / "todo.yaml").write_text("workers: -1\n")

        result = runner.invoke(main, ["--config", "todo.yaml", "stat"])

        assert result.exit_code == 1
        assert "Error: 'workers' must be a positive integer" in result.output
