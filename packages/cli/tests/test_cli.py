"""Tests for the CLI entry point."""

import json

from click.testing import CliRunner

from prthreads_cli.cli import main
from prthreads_core.filter import FilterSummary
from prthreads_core.models import PullRequestInfo


def _reaction(content="THUMBS_UP", login="alice"):
    return {"content": content, "user": {"login": login}}


def _comment(comment_id="C1", reactions=()):
    return {
        "id": comment_id,
        "body": f"Please fix {comment_id}",
        "author": {"login": "bob"},
        "createdAt": "2024-05-01T10:00:00Z",
        "diffHunk": "@@ -1,2 +1,2 @@",
        "reactions": {"nodes": list(reactions)},
    }


def _thread(thread_id="T1", comments=None, resolved=False, path="src/app.py"):
    return {
        "id": thread_id,
        "isResolved": resolved,
        "path": path,
        "line": 5,
        "originalLine": 4,
        "diffSide": "RIGHT",
        "comments": {"nodes": comments if comments is not None else [_comment(reactions=[_reaction()])]},
    }


def _write_response(tmp_path, threads):
    path = tmp_path / "threads.json"
    path.write_text(
        json.dumps(
            {
                "data": {
                    "repository": {
                        "pullRequest": {
                            "number": 42,
                            "headRefName": "feature/login",
                            "reviewThreads": {"nodes": threads},
                        }
                    }
                }
            }
        )
    )
    return str(path)


def _invoke(tmp_path, args):
    # Point --config at a file that does not exist so a stray .prthreads.yml in cwd can't leak in.
    return CliRunner().invoke(main, ["--config", str(tmp_path / "none.yml"), *args])


class TestScenarios:
    def test_approved_thread_written(self, tmp_path):
        src = _write_response(tmp_path, [_thread()])
        out = tmp_path / "out.json"

        result = _invoke(tmp_path, [src, "alice", str(out)])

        assert result.exit_code == 0, result.output
        written = json.loads(out.read_text())
        assert len(written) == 1
        assert written[0]["id"] == "T1"
        assert written[0]["comments"][0]["author"] == "bob"
        assert "reactions" not in written[0]["comments"][0]

    def test_thumbs_down_not_approved(self, tmp_path):
        src = _write_response(tmp_path, [_thread(comments=[_comment(reactions=[_reaction("THUMBS_DOWN")])])])
        out = tmp_path / "out.json"

        result = _invoke(tmp_path, [src, "alice", str(out)])

        assert result.exit_code == 0
        assert json.loads(out.read_text()) == []

    def test_resolved_thread_excluded(self, tmp_path):
        src = _write_response(tmp_path, [_thread(resolved=True)])
        out = tmp_path / "out.json"

        result = _invoke(tmp_path, [src, "alice", str(out)])

        assert result.exit_code == 0
        assert json.loads(out.read_text()) == []

    def test_thread_level_filtering_keeps_all_comments(self, tmp_path):
        comments = [_comment("C1"), _comment("C2", reactions=[_reaction()])]
        src = _write_response(tmp_path, [_thread(comments=comments)])
        out = tmp_path / "out.json"

        _invoke(tmp_path, [src, "alice", str(out)])

        written = json.loads(out.read_text())
        assert [c["id"] for c in written[0]["comments"]] == ["C1", "C2"]

    def test_malformed_json_exits_1_without_output(self, tmp_path):
        src = tmp_path / "threads.json"
        src.write_text("{ not json")
        out = tmp_path / "out.json"

        result = _invoke(tmp_path, [str(src), "alice", str(out)])

        assert result.exit_code == 1
        assert "Error parsing JSON" in result.stderr
        assert result.stdout == ""
        assert not out.exists()


class TestOutput:
    def test_success_message(self, tmp_path):
        src = _write_response(tmp_path, [_thread("T1"), _thread("T2")])
        out = tmp_path / "out.json"

        result = _invoke(tmp_path, [src, "alice", str(out)])

        assert f"Wrote 2 approved threads to {out}" in result.stdout
        assert result.stderr == ""

    def test_creates_output_directory(self, tmp_path):
        src = _write_response(tmp_path, [_thread()])
        out = tmp_path / "reports" / "pr-42" / "approved.json"

        result = _invoke(tmp_path, [src, "alice", str(out)])

        assert result.exit_code == 0
        assert out.exists()

    def test_byte_identical_on_rerun(self, tmp_path):
        src = _write_response(tmp_path, [_thread("T1"), _thread("T2", resolved=True), _thread("T3")])
        out = tmp_path / "out.json"

        _invoke(tmp_path, [src, "alice", str(out)])
        first = out.read_bytes()
        _invoke(tmp_path, [src, "alice", str(out)])

        assert out.read_bytes() == first

    def test_show_prints_table(self, tmp_path):
        src = _write_response(tmp_path, [_thread(path="src/auth.py")])

        result = _invoke(tmp_path, [src, "alice", str(tmp_path / "out.json"), "--show"])

        assert result.exit_code == 0
        assert "src/auth.py" in result.output
        assert "unresolved: 1" in result.output

    def test_show_with_no_approved_threads(self, tmp_path):
        src = _write_response(tmp_path, [_thread(resolved=True)])

        result = _invoke(tmp_path, [src, "alice", str(tmp_path / "out.json"), "--show"])

        assert "No approved threads." in result.output


class TestUsageErrors:
    def test_missing_arguments_exit_1(self, tmp_path):
        result = _invoke(tmp_path, ["only-one.json"])
        assert result.exit_code == 1
        assert "Usage:" in result.stderr
        assert "Missing argument" in result.stderr
        assert result.stdout == ""

    def test_no_arguments_exit_1(self):
        result = CliRunner().invoke(main, [])
        assert result.exit_code == 1

    def test_unknown_option_exit_1(self, tmp_path):
        result = _invoke(tmp_path, ["a.json", "alice", "out.json", "--bogus"])
        assert result.exit_code == 1


class TestErrors:
    def test_missing_input_file(self, tmp_path):
        out = tmp_path / "out.json"
        result = _invoke(tmp_path, [str(tmp_path / "missing.json"), "alice", str(out)])

        assert result.exit_code == 1
        assert "Error reading file" in result.stderr
        assert not out.exists()

    def test_schema_error_names_field(self, tmp_path):
        src = tmp_path / "threads.json"
        src.write_text(json.dumps({"data": {"repository": {}}}))
        out = tmp_path / "out.json"

        result = _invoke(tmp_path, [str(src), "alice", str(out)])

        assert result.exit_code == 1
        assert "data.repository.pullRequest" in result.stderr
        assert not out.exists()

    def test_invalid_config_exit_1(self, tmp_path):
        cfg = tmp_path / "bad.yml"
        cfg.write_text("reaction: [oops\n")
        src = _write_response(tmp_path, [_thread()])

        result = CliRunner().invoke(main, ["--config", str(cfg), src, "alice", str(tmp_path / "out.json")])

        assert result.exit_code == 1
        assert "Invalid YAML" in result.stderr

    def test_non_string_exclude_in_config_exit_1(self, tmp_path):
        cfg = tmp_path / "bad.yml"
        cfg.write_text("exclude:\n  - 123\n")
        src = _write_response(tmp_path, [_thread()])
        out = tmp_path / "out.json"

        result = CliRunner().invoke(main, ["--config", str(cfg), src, "alice", str(out)])

        assert result.exit_code == 1
        assert "exclude must be a list of patterns" in result.stderr
        assert not out.exists()


class TestOptions:
    def test_reaction_option(self, tmp_path):
        src = _write_response(tmp_path, [_thread(comments=[_comment(reactions=[_reaction("HEART")])])])
        out = tmp_path / "out.json"

        _invoke(tmp_path, [src, "alice", str(out), "--reaction", "HEART"])

        assert len(json.loads(out.read_text())) == 1

    def test_reaction_from_config_file(self, tmp_path):
        cfg = tmp_path / ".prthreads.yml"
        cfg.write_text("reaction: HEART\n")
        src = _write_response(tmp_path, [_thread(comments=[_comment(reactions=[_reaction("HEART")])])])
        out = tmp_path / "out.json"

        CliRunner().invoke(main, ["--config", str(cfg), src, "alice", str(out)])

        assert len(json.loads(out.read_text())) == 1

    def test_config_from_env_var(self, tmp_path, monkeypatch):
        cfg = tmp_path / "env.yml"
        cfg.write_text("exclude:\n  - docs/\n")
        monkeypatch.setenv("PRTHREADS_CONFIG", str(cfg))
        src = _write_response(tmp_path, [_thread("T1", path="docs/readme.md"), _thread("T2")])
        out = tmp_path / "out.json"

        CliRunner().invoke(main, [src, "alice", str(out)])

        assert [t["id"] for t in json.loads(out.read_text())] == ["T2"]

    def test_exclude_option_adds_to_config(self, tmp_path):
        src = _write_response(
            tmp_path,
            [_thread("T1", path="yarn.lock"), _thread("T2", path="app/migrations/1.py"), _thread("T3")],
        )
        out = tmp_path / "out.json"

        _invoke(tmp_path, [src, "alice", str(out), "--exclude", "*.lock", "--exclude", "migrations"])

        assert [t["id"] for t in json.loads(out.read_text())] == ["T3"]

    def test_config_passed_to_run_filter(self, tmp_path, mocker):
        summary = FilterSummary(
            input_path="in.json",
            output_path="out.json",
            reviewer="alice",
            reaction="ROCKET",
            pull_request=PullRequestInfo(),
        )
        mock_run = mocker.patch("prthreads_core.filter.run_filter", return_value=summary)

        result = _invoke(tmp_path, ["in.json", "alice", "out.json", "--reaction", "ROCKET"])

        assert result.exit_code == 0
        args, kwargs = mock_run.call_args
        assert args == ("in.json", "alice", "out.json")
        assert kwargs["config"]["reaction"] == "ROCKET"
        assert "Wrote 0 approved threads to out.json" in result.output
