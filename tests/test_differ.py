"""
Tests for diff capabilities and report formatting.
"""

import subprocess
from datetime import datetime, timezone

from specwatch.differ import (
    CommandDiffer,
    DiffResult,
    UnifiedDiffer,
    build_differ,
    diff_stamp,
    format_diff_report,
)


class TestCommandDiffer:
    """External tool invocation."""

    def test_passes_both_paths(self, tmp_path, monkeypatch):
        seen = {}

        def fake_run(cmd, capture_output, text, timeout):
            seen["cmd"] = cmd
            return subprocess.CompletedProcess(cmd, 0, stdout="no changes\n", stderr="")

        monkeypatch.setattr("specwatch.differ.subprocess.run", fake_run)
        old, new = tmp_path / "old.json", tmp_path / "new.json"

        result = CommandDiffer(["openapi-diff", "--fmt", "text"])(old, new)

        assert seen["cmd"] == ["openapi-diff", "--fmt", "text", str(old), str(new)]
        assert result == DiffResult(stdout="no changes\n", stderr="", failed=False)

    def test_nonzero_exit_is_captured(self, tmp_path, monkeypatch):
        def fake_run(cmd, capture_output, text, timeout):
            return subprocess.CompletedProcess(cmd, 1, stdout="partial", stderr="boom")

        monkeypatch.setattr("specwatch.differ.subprocess.run", fake_run)

        result = CommandDiffer(["tool"])(tmp_path / "a", tmp_path / "b")

        assert result.failed
        assert result.stdout == "partial"
        assert result.stderr == "boom"

    def test_missing_executable_is_captured(self, tmp_path):
        result = CommandDiffer(["specwatch-no-such-diff-tool"])(tmp_path / "a", tmp_path / "b")

        assert result.failed
        assert "could not be started" in result.stderr

    def test_timeout_is_captured(self, tmp_path, monkeypatch):
        def fake_run(cmd, capture_output, text, timeout):
            raise subprocess.TimeoutExpired(cmd, timeout, output=b"half")

        monkeypatch.setattr("specwatch.differ.subprocess.run", fake_run)

        result = CommandDiffer(["tool"], timeout=5)(tmp_path / "a", tmp_path / "b")

        assert result.failed
        assert result.stdout == "half"
        assert "timed out" in result.stderr


class TestUnifiedDiffer:
    def test_line_diff(self, tmp_path):
        old = tmp_path / "2026-10-01-aaaaaaaaaaaa.json"
        new = tmp_path / "2026-10-18-bbbbbbbbbbbb.json"
        old.write_text('{\n  "a": 1\n}\n', encoding="utf-8")
        new.write_text('{\n  "a": 2\n}\n', encoding="utf-8")

        result = UnifiedDiffer()(old, new)

        assert not result.failed
        assert '-  "a": 1' in result.stdout
        assert '+  "a": 2' in result.stdout
        assert old.name in result.stdout

    def test_missing_file(self, tmp_path):
        result = UnifiedDiffer()(tmp_path / "missing.json", tmp_path / "other.json")
        assert result.failed


class TestBuildDiffer:
    def test_unified_keyword(self):
        assert isinstance(build_differ("unified"), UnifiedDiffer)
        assert isinstance(build_differ(" Unified "), UnifiedDiffer)

    def test_command_string(self):
        differ = build_differ("npx -y @redocly/cli@latest diff", timeout=60)
        assert isinstance(differ, CommandDiffer)
        assert differ.command[1:] == ["-y", "@redocly/cli@latest", "diff"]
        assert differ.timeout == 60


class TestDiffReport:
    def test_stamp_is_filesystem_safe(self):
        now = datetime(2026, 10, 18, 7, 30, 0, 123000, tzinfo=timezone.utc)
        assert diff_stamp(now) == "2026-10-18T07-30-00-123Z"

    def test_report_layout(self):
        text = format_diff_report("STAMP", "old.json", "new.json", DiffResult(stdout="body\n"))
        assert text.splitlines()[:5] == ["=== STAMP DIFF ===", "Old: old.json", "New: new.json", "", "body"]
        assert "[stderr]" not in text

    def test_report_with_stderr(self):
        text = format_diff_report("STAMP", "old.json", "new.json", DiffResult(stdout="out", stderr="warn", failed=True))
        assert text.endswith("out\n\n[stderr]\nwarn")
