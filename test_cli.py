import pytest
from click.testing import CliRunner

from timelens.cli.main import cli


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def env_file(config, tmp_path):
    # an env file path resets the CLI's config after conftest cleared the environment
    return str(tmp_path / '.env')


def test_classify_prints_category(runner, env_file):
    result = runner.invoke(cli, ['--env-file', env_file, 'classify', 'Morning yoga'])

    assert result.exit_code == 0
    assert 'exercise' in result.output
    assert 'medium' in result.output


def test_report_unknown_user_fails(runner, env_file):
    result = runner.invoke(cli, ['--env-file', env_file, 'report', '--username', 'nobody@example.com'])

    assert result.exit_code == 1
    assert 'No user named nobody@example.com' in result.output


def test_report_without_username_fails_when_demo_mode_is_off(monkeypatch, runner, env_file):
    monkeypatch.setenv('DEMO_USERNAME', '')

    result = runner.invoke(cli, ['--env-file', env_file, 'report'])

    assert result.exit_code == 1
    assert 'demo mode is off' in result.output
