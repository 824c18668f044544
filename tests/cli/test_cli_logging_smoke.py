from __future__ import annotations

import logging
from pathlib import Path

import pytest

from routegraph import cli


@pytest.fixture
def network(tmp_path: Path) -> Path:
    path = tmp_path / "t.yaml"
    path.write_text(
        """
edges:
  - {source: A, target: B, weight: 1}
"""
    )
    return path


def test_cli_verbose_and_quiet_switch_levels(caplog, network: Path) -> None:
    with caplog.at_level(logging.DEBUG, logger="routegraph"):
        cli.main(["--verbose", "path", str(network), "A", "B"])
    assert any("Debug logging enabled" in r.message for r in caplog.records)

    caplog.clear()
    with caplog.at_level(logging.INFO, logger="routegraph"):
        cli.main(
            ["--quiet", "solve", str(network), "-s", "A", "-e", "B", "--no-results"]
        )
    assert not any(r.levelno == logging.INFO for r in caplog.records)


def test_quiet_still_prints_results(capsys, network: Path) -> None:
    cli.main(["--quiet", "path", str(network), "A", "B"])
    out = capsys.readouterr().out
    assert "Shortest path from A to B" in out
    assert "Distance: 1" in out


def test_quiet_help_describes_log_filtering(capsys) -> None:
    with pytest.raises(SystemExit):
        cli.main(["--help"])
    help_text = " ".join(capsys.readouterr().out.split())
    assert "Log warnings and errors only; results are still printed" in help_text
