"""Tests for the sqllogic command line."""

import json
from pathlib import Path

from sqllogic.cli import main, run_files
from sqllogic.runner import RunnerConfig


class TestRunFiles:
    """Tests for script execution from files."""

    def test_passing_script(self, tmp_path: Path, capsys):
        """Test that a passing script returns 0 and prints a summary."""
        script = tmp_path / "pass.test"
        script.write_text("""
# create and read back
statement ok
create table t(v1 int)

statement ok
insert into t values (1)

query I
select v1 from t
----
1
""")

        result = run_files([script], RunnerConfig())
        out = capsys.readouterr().out

        assert result == 0
        assert f"{script}: PASS" in out
        assert "3 passed, 0 failed" in out

    def test_failing_script(self, tmp_path: Path, capsys):
        """Test that a mismatch returns 1 and shows the diff."""
        script = tmp_path / "fail.test"
        script.write_text("query I\nselect 1\n----\n2\n")

        result = run_files([script], RunnerConfig())
        out = capsys.readouterr().out

        assert result == 1
        assert f"{script}:1: fail [query I]" in out
        assert "Expected:" in out
        assert "Actual:" in out

    def test_parse_error(self, tmp_path: Path, capsys):
        script = tmp_path / "bad.test"
        script.write_text("statement ok\n")

        result = run_files([script], RunnerConfig())
        out = capsys.readouterr().out

        assert result == 1
        assert "Parse errors:" in out

    def test_json_summary(self, tmp_path: Path, capsys):
        script = tmp_path / "pass.test"
        script.write_text("statement ok\nselect 1\n")
        json_path = tmp_path / "summary.json"

        result = run_files([script], RunnerConfig(), json_path=json_path)

        assert result == 0
        summary = json.loads(json_path.read_text())
        assert summary["ok"] is True
        assert summary["counts"]["pass"] == 1

    def test_quiet(self, tmp_path: Path, capsys):
        script = tmp_path / "pass.test"
        script.write_text("statement ok\nselect 1\n")

        run_files([script], RunnerConfig(), quiet=True)
        out = capsys.readouterr().out

        assert str(script) not in out
        assert "1 passed" in out


class TestMain:
    """Tests for argument handling."""

    def test_main_runs_scripts(self, tmp_path: Path, capsys):
        script = tmp_path / "pass.test"
        script.write_text("statement ok\nselect 1\n")
        assert main([str(script)]) == 0

    def test_main_duckdb_engine(self, tmp_path: Path, capsys):
        script = tmp_path / "cast.test"
        script.write_text("query T\nSELECT CAST('2016-03-26' AS DATE)\n----\n2016-03-26\n")
        assert main(["-e", "duckdb", str(script)]) == 0

    def test_main_missing_file(self, tmp_path: Path, capsys):
        result = main([str(tmp_path / "nope.test")])
        err = capsys.readouterr().err
        assert result == 2
        assert "File not found" in err

    def test_main_rejects_zero_workers(self, tmp_path: Path, capsys):
        script = tmp_path / "pass.test"
        script.write_text("statement ok\nselect 1\n")
        assert main(["-j", "0", str(script)]) == 2

    def test_main_rejects_non_positive_timeout(self, tmp_path: Path, capsys):
        script = tmp_path / "pass.test"
        script.write_text("statement ok\nselect 1\n")
        assert main(["-t", "0", str(script)]) == 2

    def test_main_parallel_with_timeout(self, tmp_path: Path, capsys):
        paths = []
        for i in range(4):
            script = tmp_path / f"s{i}.test"
            script.write_text("statement ok\ncreate table t(v int)\n")
            paths.append(str(script))
        assert main(["-j", "2", "-t", "5", *paths]) == 0

    def test_main_unavailable_backend(self, tmp_path: Path, capsys):
        script = tmp_path / "pass.test"
        script.write_text("statement ok\nselect 1\n")
        blocker = tmp_path / "blocker"
        blocker.write_text("not a directory")

        result = main(["-d", str(blocker / "dbs"), str(script)])

        assert result == 3
