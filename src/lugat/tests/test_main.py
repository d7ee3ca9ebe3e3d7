"""Tests for the command-line entry point."""
import json
from unittest.mock import MagicMock, patch

import pytest
from sqlalchemy.orm import Session

from lugat.__main__ import main
from lugat.services.storage import SqlStorage


@pytest.fixture
def patched_db(db: Session):
    """Point the entry point at the test database."""
    with patch("lugat.__main__.init_db"), patch("lugat.__main__.SessionLocal", return_value=db):
        yield db


def test_stats_command(patched_db: Session, storage: SqlStorage, capsys) -> None:
    storage.add_word(ottoman="قلم", pronunciation="kalem", turkish="kalem")

    assert main(["stats"]) == 0

    output = json.loads(capsys.readouterr().out)
    assert output["totalWords"] == 1
    assert output["pendingFlashcards"] == 1
    assert output["accuracy"] == 0


def test_new_command(patched_db: Session, storage: SqlStorage, capsys) -> None:
    storage.add_word(ottoman="قلم", pronunciation="kalem", turkish="kalem")

    assert main(["new"]) == 0

    output = json.loads(capsys.readouterr().out)
    assert [word["pronunciation"] for word in output] == ["kalem"]


def test_reset_command(patched_db: Session, capsys) -> None:
    assert main(["reset"]) == 0
    assert json.loads(capsys.readouterr().out) == {"deleted": 0}


def test_unknown_command(capsys) -> None:
    assert main(["export"]) == 2
    assert "Usage" in capsys.readouterr().err


def test_metrics_server_started_when_enabled(patched_db: Session, monkeypatch) -> None:
    from lugat.config import settings

    monkeypatch.setattr(settings.monitoring, "enabled", True)
    start = MagicMock()
    monkeypatch.setattr("lugat.__main__.start_monitoring", start)

    assert main(["due"]) == 0
    start.assert_called_once_with(settings.monitoring.port)


if __name__ == "__main__":
    pytest.main([__file__])
