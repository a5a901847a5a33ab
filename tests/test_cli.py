"""CLI smoke tests."""

from click.testing import CliRunner

from gatehouse import __version__
from gatehouse.cli.main import main


def test_version():
    result = CliRunner().invoke(main, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.output


def test_help_lists_commands():
    result = CliRunner().invoke(main, ["--help"])
    assert result.exit_code == 0
    for command in ("serve", "init-db", "users"):
        assert command in result.output
