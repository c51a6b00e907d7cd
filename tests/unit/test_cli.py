"""
Unit tests for the command-line interface.
"""

import json

import pytest

from repair_builder import cli
from repair_builder.export.pipeline import IMAGE_UNSUPPORTED_NOTICE


@pytest.fixture
def run(tmp_path, taxonomy_data):
    """Return a function that runs the CLI against a temp store and taxonomy."""
    taxonomy_path = tmp_path / "taxonomy.json"
    taxonomy_path.write_text(json.dumps(taxonomy_data), encoding="utf-8")
    storage_dir = tmp_path / "store"

    def _run(*args: str) -> int:
        return cli.main(
            ["--storage-dir", str(storage_dir), "--taxonomy", str(taxonomy_path), *args]
        )

    return _run


def test_version(capsys):
    assert cli.main(["--version"]) == 0
    assert "repair-builder version" in capsys.readouterr().out


def test_command_required(capsys):
    assert cli.main([]) == 1
    assert "Command required" in capsys.readouterr().err


class TestSelectionCommands:
    """Tests for select/override/note."""

    def test_select_toggles(self, run, capsys):
        assert run("select", "1.1.1.1", "eligible") == 0
        assert "1.1.1.1: ELIGIBLE" in capsys.readouterr().out
        assert run("select", "1.1.1.1", "eligible") == 0
        assert "1.1.1.1: UNSELECTED" in capsys.readouterr().out

    def test_selection_persists_between_runs(self, run, tmp_path, capsys):
        run("select", "1.1.2.1", "not_eligible")
        capsys.readouterr()
        assert run("stats", "--json") == 0
        stats = json.loads(capsys.readouterr().out)
        assert stats["status"]["not_eligible"] == 1
        assert stats["status"]["unselected"] == 4
        assert (tmp_path / "store" / "catalog_selections_v1.json").exists()

    def test_override_and_clear(self, run, capsys):
        assert run("override", "1.1.1.1", "--urgency", "Non-Critical") == 0
        assert "urgency override:   Non-Critical" in capsys.readouterr().out
        assert run("override", "1.1.1.1", "--clear") == 0
        assert "override" not in capsys.readouterr().out

    def test_override_requires_a_value(self, run, capsys):
        assert run("override", "1.1.1.1") == 1
        assert "--urgency" in capsys.readouterr().err

    def test_note(self, run, capsys):
        assert run("note", "1.1.1.1", "done in phase 1") == 0
        assert "notes: done in phase 1" in capsys.readouterr().out

    @pytest.mark.parametrize(
        "args",
        [
            ("select", "9.9.9.9", "eligible"),
            ("override", "9.9.9.9", "--urgency", "Critical"),
            ("note", "9.9.9.9", "typo"),
        ],
    )
    def test_unknown_activity_rejected(self, run, tmp_path, capsys, args):
        assert run(*args) == 2
        assert "9.9.9.9" in capsys.readouterr().err
        assert not (tmp_path / "store" / "catalog_selections_v1.json").exists()

    def test_unknown_activity_leaves_existing_selections(self, run, capsys):
        run("select", "1.1.1.1", "eligible")
        assert run("select", "9.9.9.9", "eligible") == 2
        capsys.readouterr()
        run("stats", "--json")
        stats = json.loads(capsys.readouterr().out)
        assert stats["status"]["eligible"] == 1


class TestErrors:
    """Tests for error reporting."""

    def test_missing_taxonomy(self, tmp_path, capsys):
        missing = tmp_path / "missing.json"
        args = ["--storage-dir", str(tmp_path), "--taxonomy", str(missing), "stats"]
        assert cli.main(args) == 1
        assert f"File not found: {missing}" in capsys.readouterr().err

    def test_invalid_taxonomy_json(self, tmp_path, capsys):
        broken = tmp_path / "broken.json"
        broken.write_text("{not json", encoding="utf-8")
        args = ["--storage-dir", str(tmp_path), "--taxonomy", str(broken), "stats"]
        assert cli.main(args) == 1
        assert "Invalid JSON in taxonomy" in capsys.readouterr().err


class TestListAndStats:
    """Tests for list/stats output."""

    def test_list_all(self, run, capsys):
        assert run("list") == 0
        out = capsys.readouterr().out
        assert "Repair cracked foundations [Foundation]" in out
        assert "Activities 5 of 5" in out

    def test_list_filtered(self, run, capsys):
        run("select", "1.1.1.2", "eligible")
        capsys.readouterr()
        assert run("list", "--status", "eligible") == 0
        out = capsys.readouterr().out
        assert "Waterproof basement walls" in out
        assert "Repair cracked foundations" not in out
        assert "Pillars 1 of 2" in out

    def test_list_critical_only(self, run, capsys):
        assert run("list", "--critical-only") == 0
        out = capsys.readouterr().out
        assert "Priority 1" in out
        assert "Activities 2 of 5" in out

    def test_stats_text(self, run, capsys):
        assert run("stats") == 0
        out = capsys.readouterr().out
        assert "Total activities: 5" in out
        assert "Unselected:   5" in out


class TestExportCommands:
    """Tests for catalog and manual exports."""

    def test_export_csv(self, run, tmp_path, capsys):
        run("select", "1.1.1.1", "eligible")
        out_dir = tmp_path / "exports"
        assert run("export", "--format", "csv", "--output", str(out_dir)) == 0
        files = list(out_dir.glob("Eligible_Activities_Catalog_*.csv"))
        assert len(files) == 1
        assert '"ELIGIBLE"' in files[0].read_text(encoding="utf-8")

    def test_export_levels_and_elements(self, run, tmp_path):
        out_dir = tmp_path / "exports"
        assert run("export", "--levels", "type", "--elements", "--output", str(out_dir)) == 0
        content = next(out_dir.glob("*.csv")).read_text(encoding="utf-8")
        assert content.splitlines()[0] == '"Type","Activity","Status"'

    def test_export_report(self, run, tmp_path):
        out_dir = tmp_path / "exports"
        assert run("export", "--format", "pdf-print", "--output", str(out_dir)) == 0
        assert len(list(out_dir.glob("Eligible_Activities_Report_*.html"))) == 1

    def test_export_image_not_supported(self, run, tmp_path, capsys):
        out_dir = tmp_path / "exports"
        assert run("export", "--format", "image-placeholder", "--output", str(out_dir)) == 2
        assert IMAGE_UNSUPPORTED_NOTICE in capsys.readouterr().err
        assert not out_dir.exists()

    def test_export_unknown_format(self, run, capsys):
        assert run("export", "--format", "docx") == 2
        assert "not supported" in capsys.readouterr().err

    def test_steps(self, run, capsys):
        assert run("steps") == 0
        lines = capsys.readouterr().out.strip().splitlines()
        assert len(lines) == 11
        assert "warning" in lines[0]

    def test_manual_export(self, run, tmp_path, capsys):
        out_dir = tmp_path / "exports"
        assert run("manual-export", "--output", str(out_dir)) == 0
        files = list(out_dir.glob("Repair_Manual_*_Draft.doc"))
        assert len(files) == 1
        assert files[0].read_bytes().startswith(b"\xef\xbb\xbf")
