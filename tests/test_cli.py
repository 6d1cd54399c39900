"""Tests for the command line interface."""

import pytest
import yaml
from typer.testing import CliRunner

from club_ladder import __version__
from club_ladder.cli import app
from club_ladder.core.config import DATABASE_URL_ENV

runner = CliRunner()


@pytest.fixture
def database(tmp_path, monkeypatch):
    """Database URL in a temporary directory."""
    monkeypatch.delenv(DATABASE_URL_ENV, raising=False)
    monkeypatch.chdir(tmp_path)
    return f"sqlite:///{tmp_path / 'ladder.db'}"


def _invoke(database: str, *args: str):
    return runner.invoke(app, [*args, "--database", database])


class TestCli:
    """Tests for the ladder commands."""

    def test_version(self):
        """Test --version prints the version and exits."""
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert f"club-ladder v{__version__}" in result.output

    def test_init_empty(self, database):
        """Test init creates an empty ladder."""
        result = _invoke(database, "init")
        assert result.exit_code == 0
        assert "Ladder ready" in result.output

    def test_seed_and_show(self, database):
        """Test seeding fills the ladder in order."""
        result = _invoke(database, "seed")
        assert result.exit_code == 0
        assert "Seeded 8 players." in result.output

        result = _invoke(database, "ladder", "--format", "markdown")
        assert result.exit_code == 0
        assert result.output.index("Alex Johnson") < result.output.index("Amanda Taylor")

    def test_seed_twice_fails(self, database):
        """Test seeding a populated ladder is an error."""
        _invoke(database, "seed")
        result = _invoke(database, "seed")
        assert result.exit_code == 1
        assert "already has 8 player" in result.output

    def test_add_player(self, database):
        """Test a new player joins at the bottom."""
        result = _invoke(database, "add-player", "Grace Hopper")
        assert result.exit_code == 0
        assert "rank #1" in result.output

    def test_record_upset(self, database):
        """Test recording an upset by player name."""
        _invoke(database, "seed")

        result = _invoke(database, "record", "David Miller", "Michael Brown", "3", "1")
        assert result.exit_code == 0
        assert "Upset!" in result.output

        result = _invoke(database, "ladder", "--format", "markdown")
        assert result.output.index("David Miller") < result.output.index("Michael Brown")

        result = _invoke(database, "history", "--format", "markdown")
        assert result.exit_code == 0
        assert "3-1" in result.output

    def test_record_defended(self, database):
        """Test a defended challenge leaves the ladder alone."""
        _invoke(database, "seed")
        result = _invoke(
            database,
            "record",
            "Sarah Williams",
            "Emily Davis",
            "3",
            "2",
            "--challenger",
            "Emily Davis",
        )
        assert result.exit_code == 0
        assert "Rankings unchanged" in result.output

    def test_record_out_of_range(self, database):
        """Test a challenge beyond the spread exits with an error."""
        _invoke(database, "seed")
        result = _invoke(database, "record", "Amanda Taylor", "Alex Johnson", "3", "1")
        assert result.exit_code == 1
        assert "Invalid match" in result.output

    def test_record_unknown_player(self, database):
        """Test an unknown player name exits with an error."""
        _invoke(database, "seed")
        result = _invoke(database, "record", "Nobody", "Alex Johnson", "3", "1")
        assert result.exit_code == 1
        assert "does not exist" in result.output

    def test_remove(self, database):
        """Test removal with --yes skips the prompt."""
        _invoke(database, "seed")
        result = _invoke(database, "remove", "Alex Johnson", "--yes")
        assert result.exit_code == 0
        assert "was #1" in result.output

    def test_empty_history(self, database):
        """Test history on a fresh ladder."""
        result = _invoke(database, "history")
        assert result.exit_code == 0
        assert "No matches recorded yet" in result.output

    def test_validate(self, tmp_path):
        """Test validating a config file."""
        path = tmp_path / "ladder.yaml"
        path.write_text(yaml.dump({"club_name": "Riverside", "ranking": {"challenge_spread": 2}}))

        result = runner.invoke(app, ["validate", str(path)])
        assert result.exit_code == 0
        assert "Configuration is valid!" in result.output
        assert "Challenge spread: 2" in result.output

    def test_validate_invalid(self, tmp_path):
        """Test an invalid config exits with status 1."""
        path = tmp_path / "ladder.yaml"
        path.write_text(yaml.dump({"ranking": {"challenge_spread": 0}}))

        result = runner.invoke(app, ["validate", str(path)])
        assert result.exit_code == 1
        assert "Invalid configuration" in result.output
