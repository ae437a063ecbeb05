"""CLI tests for company profile commands."""

from tourops.cli.main import cli


def _run(cli_runner, temp_db, *args):
    return cli_runner.invoke(cli, ["--db-path", temp_db.database_path, *args])


def test_show_before_set(cli_runner, temp_db):
    """Test show explains how to create the profile."""
    result = _run(cli_runner, temp_db, "company", "show")
    assert result.exit_code == 0
    assert "No company profile yet" in result.output


def test_set_and_show(cli_runner, temp_db):
    """Test setting the profile and showing it."""
    result = _run(
        cli_runner,
        temp_db,
        "company",
        "set",
        "--name",
        "Mediterranean Explorer Tours",
        "--email",
        "info@mediterraneanexplorer.com",
        "--phone",
        "+90 212 368 4200",
        "--postal-code",
        "34367",
        "--license-number",
        "TURSAB-A-8524",
    )
    assert result.exit_code == 0
    assert "Updated company profile" in result.output

    result = _run(cli_runner, temp_db, "company", "set", "--currency", "eur")
    assert result.exit_code == 0

    result = _run(cli_runner, temp_db, "company", "show")
    assert result.exit_code == 0
    assert "Mediterranean Explorer Tours" in result.output
    assert "34367" in result.output
    assert "TURSAB-A-8524" in result.output
    assert "EUR" in result.output


def test_set_requires_name_email_phone(cli_runner, temp_db):
    """Test the first save reports every missing required field."""
    result = _run(cli_runner, temp_db, "company", "set", "--city", "Istanbul")
    assert result.exit_code == 1
    assert "Validation failed" in result.output
    assert "phone" in result.output


def test_set_without_options(cli_runner, temp_db):
    """Test set with no options changes nothing."""
    result = _run(cli_runner, temp_db, "company", "set")
    assert result.exit_code == 0
    assert "Nothing to change." in result.output
