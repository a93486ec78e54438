"""Tests for the command-line entrypoint."""

import json

import pytest

from soulprint.run import main, read_transcript


@pytest.fixture
def cli(tmp_path, capsys):
    """Run the CLI against a JSON store in a temporary directory."""
    store = str(tmp_path / "profiles")
    config = str(tmp_path / "missing.yaml")

    def run(*args):
        code = main(["--config", config, "--store-path", store, *args])
        out = capsys.readouterr().out
        return code, json.loads(out) if out.strip() else None

    return run


@pytest.fixture
def transcript(tmp_path):
    path = tmp_path / "transcript.jsonl"
    lines = [
        {"user_id": "alice", "text": "I love parties and meeting new people!"},
        {"user_id": "bob", "text": "I plan everything and keep a schedule",
         "context": {"response_latency_ms": 3000}},
        {"user_id": "alice", "text": "Travel and music make me happy",
         "context": {"interaction_type": "casual"}},
    ]
    path.write_text("\n".join(json.dumps(line) for line in lines) + "\n\n")
    return str(path)


class TestCli:
    """Subcommands end to end."""

    def test_analyze(self, cli):
        code, result = cli("analyze", "--user", "alice", "--text", "I love parties!",
                           "--latency-ms", "2000")
        assert code == 0
        assert result["profile"]["messageCount"] == 1
        assert result["extraction"]["families"]["communication"]["scores"]["response_time"] == 0.9

    def test_ingest_then_score(self, cli, transcript):
        code, result = cli("ingest", transcript)
        assert code == 0
        assert result == {"messages": 3, "users": ["alice", "bob"]}

        code, result = cli("compatibility", "alice", "bob")
        assert code == 0
        assert 0.0 <= result["overall"] <= 1.0

        code, result = cli("code", "alice")
        assert code == 0
        assert result["code"].startswith("#")
        assert "archetype" in result

        code, result = cli("rank", "alice", "--limit", "1")
        assert code == 0
        assert [c["user_id"] for c in result["candidates"]] == ["bob"]

    def test_predict_with_progression(self, cli, transcript, tmp_path):
        cli("ingest", transcript)
        progression = tmp_path / "progression.json"
        progression.write_text(json.dumps({
            "start_date": "2026-01-01T00:00:00+00:00",
            "relationship_stage": "pre_relationship",
            "milestones_achieved": 1
        }))

        code, result = cli("predict", "alice", "bob", "--progression", str(progression))
        assert code == 0
        assert set(result["horizons"]) == {"short_term", "medium_term", "long_term"}

    def test_code_for_unknown_user(self, cli):
        code, result = cli("code", "nobody")
        assert code == 0
        assert result["code"] is None

    def test_evaluate(self, cli, transcript, tmp_path):
        cli("ingest", transcript)
        output = tmp_path / "report.json"

        code, result = cli("evaluate", "--output", str(output))
        assert code == 0
        assert result["profile_stats"]["profile_count"] == 2
        assert output.exists()

    def test_bad_transcript(self, cli, tmp_path):
        """A transcript line without user_id fails the command."""
        path = tmp_path / "bad.jsonl"
        path.write_text(json.dumps({"text": "hello"}) + "\n")
        code, result = cli("ingest", str(path))
        assert code == 1
        assert result is None

    def test_unusable_store_path(self, tmp_path, capsys):
        """A store path that cannot be created is a storage failure."""
        blocker = tmp_path / "file"
        blocker.write_text("not a directory")
        code = main(["--config", str(tmp_path / "missing.yaml"), "--store-path", str(blocker),
                     "analyze", "--user", "alice", "--text", "hi"])
        assert code == 2


class TestReadTranscript:

    def test_skips_blank_lines(self, transcript):
        messages = read_transcript(transcript)
        assert len(messages) == 3
        assert messages[1]["context"]["response_latency_ms"] == 3000
