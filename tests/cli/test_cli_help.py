from typer.testing import CliRunner
from folder_insight.cli.app import app

runner = CliRunner()

def test_cli_help_runs():
    result = runner.invoke(app, ["--help"])
    assert result.exit_code == 0
    assert "Usage" in result.stdout


def test_scan_help_lists_options():
    result = runner.invoke(app, ["scan", "--help"])
    assert result.exit_code == 0
    for flag in ("--max-depth", "--ignore", "--follow-symlinks", "--tree", "--top"):
        assert flag in result.stdout
