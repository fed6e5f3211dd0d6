"""
Tests for the CLI module.
"""
import json
import os
import sys
import tempfile
from unittest.mock import patch

import pytest

from viewguard.cli import main, parse_args

ROWS = [
    {
        "id": "b1", "promoterId": "bob", "campaignId": "c1", "platform": "tiktok",
        "platformPostId": "post-9", "viewCount": 10000, "likeCount": 0,
        "commentCount": 0, "shareCount": 0, "timestamp": "2026-03-01T12:00:00Z",
    },
    {
        "id": "a1", "promoterId": "alice", "campaignId": "c1", "platform": "tiktok",
        "platformPostId": "post-1", "viewCount": 100, "likeCount": 15,
        "commentCount": 3, "shareCount": 1, "timestamp": "2026-03-01T12:00:00Z",
    },
]


@pytest.fixture
def export_path():
    """Create a temporary JSON export."""
    with tempfile.NamedTemporaryFile("w", suffix=".json", delete=False) as f:
        json.dump(ROWS, f)
        path = f.name

    yield path

    # Cleanup
    os.unlink(path)


class TestParseArgs:
    """Tests for argument parsing."""

    def test_analyze_command(self):
        args = parse_args(["analyze", "views.csv", "--promoter", "p1", "--campaign", "c1"])
        assert args.command == "analyze"
        assert args.path == "views.csv"
        assert args.promoter == "p1"
        assert args.json is False
        assert args.aggregation is None

    def test_reads_sys_argv(self):
        """Without argv the parser falls back to sys.argv."""
        with patch.object(sys, "argv", ["viewguard", "--log-level", "DEBUG", "config"]):
            args = parse_args()
            assert args.command == "config"
            assert args.log_level == "DEBUG"

    def test_analyze_requires_pair(self):
        with pytest.raises(SystemExit):
            parse_args(["analyze", "views.csv"])

    def test_batch_command_with_limit(self):
        args = parse_args(["--json", "batch", "views.jsonl", "--limit", "5"])
        assert args.command == "batch"
        assert args.limit == 5
        assert args.json is True

    def test_aggregation_choice(self):
        args = parse_args(["--aggregation", "latest", "config"])
        assert args.aggregation == "latest"
        with pytest.raises(SystemExit):
            parse_args(["--aggregation", "median", "config"])

    def test_command_required(self):
        with pytest.raises(SystemExit):
            parse_args([])


class TestMain:
    """Tests for running commands through main."""

    def test_analyze_json(self, export_path, capsys):
        code = main(["--json", "analyze", export_path, "--promoter", "bob", "--campaign", "c1"])
        assert code == 0
        output = json.loads(capsys.readouterr().out)
        assert output["action"] == "ban"
        assert output["payout"] == "cancel"
        assert output["botScore"] == 100
        assert "summary" not in output
        assert "Ignored 1 records for other promoter/campaign pairs" in output["warnings"]

    def test_analyze_text(self, export_path, capsys):
        code = main(["analyze", export_path, "--promoter", "alice", "--campaign", "c1"])
        assert code == 0
        out = capsys.readouterr().out
        assert "Action:     none" in out
        assert "Payout:     release" in out

    def test_analyze_unknown_pair(self, export_path, capsys):
        code = main(["analyze", export_path, "--promoter", "nobody", "--campaign", "c1"])
        assert code == 2
        assert "None of the 2 records" in capsys.readouterr().err

    def test_batch_json(self, export_path, capsys):
        code = main(["--json", "batch", export_path])
        assert code == 0
        output = json.loads(capsys.readouterr().out)
        assert output["pairs_analyzed"] == 2
        assert output["by_action"]["ban"] == 1
        assert [r["promoterId"] for r in output["results"]] == ["bob"]

    def test_config_uses_environment(self, monkeypatch, capsys):
        monkeypatch.setenv("VIEWGUARD_BAN_THRESHOLD", "95")
        code = main(["--json", "--aggregation", "latest", "config"])
        assert code == 0
        output = json.loads(capsys.readouterr().out)
        assert output["confidence"]["ban"] == 95
        assert output["aggregation"] == "latest"

    def test_invalid_configuration(self, monkeypatch, capsys):
        monkeypatch.setenv("VIEWGUARD_WARNING_THRESHOLD", "10")
        code = main(["config"])
        assert code == 2
        assert "Invalid configuration" in capsys.readouterr().err

    def test_missing_file(self, capsys):
        code = main(["batch", "/nonexistent/views.csv"])
        assert code == 2
        assert "File not found" in capsys.readouterr().err
