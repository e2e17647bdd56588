#!/usr/bin/env python3
"""
Tests for the ubex-deploy command-line tool
The in-memory platform replaces the node
"""

import json
import logging
import pytest
from unittest.mock import MagicMock, patch
from typer.testing import CliRunner

from deployment.cli import app
from deployment.platform import InMemoryPlatform

runner = CliRunner()


@pytest.fixture(autouse=True)
def restore_logging():
    """Put back the root handlers the CLI replaces"""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def env(tmp_path):
    return {
        'DEPLOYMENT_FILE': str(tmp_path / 'deployment.json'),
        'LOG_FILE': str(tmp_path / 'deployment.log'),
        'DEPLOY_NETWORK': 'development',
        'SLACK_WEBHOOK': '',
        'SMTP_USERNAME': '',
    }


@pytest.fixture
def platform():
    platform = InMemoryPlatform(accessors={'AdamCoefficients': {'systemOwner': 0}})
    with patch('deployment.cli.build_platform', return_value=platform):
        yield platform


def test_help():
    """Test the help command displays usage information."""
    result = runner.invoke(app, ["--help"])
    assert result.exit_code == 0
    assert "Usage" in result.output


def test_plan(env):
    """Test the development plan is listed in deployment order."""
    result = runner.invoke(app, ["plan"], env=env)
    assert result.exit_code == 0
    assert "1. SystemOwner (depends on: -)" in result.output
    assert "4. UbexExchange (depends on: UbexStorage, AdamCoefficients, SystemOwner)" in result.output


def test_plan_production(env):
    """Test production has nothing to deploy."""
    result = runner.invoke(app, ["plan", "production"], env=env)
    assert result.exit_code == 0
    assert "Nothing to deploy for 'production'." in result.output


def test_deploy_and_verify(env, platform):
    """Test deploying development then verifying the system owner."""
    result = runner.invoke(app, ["deploy"], env=env)
    assert result.exit_code == 0, result.output
    assert "Saved deployment to" in result.output

    with open(env['DEPLOYMENT_FILE']) as f:
        record = json.load(f)
    assert record['network'] == 'development'
    assert list(record['contracts']) == ['SystemOwner', 'AdamCoefficients', 'UbexStorage', 'UbexExchange']

    owner = record['contracts']['SystemOwner']
    result = runner.invoke(app, ["verify", "AdamCoefficients", "systemOwner", "--expected", owner.lower()], env=env)
    assert result.exit_code == 0, result.output
    assert "OK: AdamCoefficients.systemOwner()" in result.output


def test_verify_mismatch(env, platform):
    """Test a wrong expected value exits with status 1."""
    runner.invoke(app, ["deploy"], env=env)
    wrong = '0x' + 'f' * 40
    result = runner.invoke(app, ["verify", "AdamCoefficients", "systemOwner", "--expected", wrong], env=env)
    assert result.exit_code == 1
    assert "Incorrect AdamCoefficients.systemOwner" in result.output


def test_verify_not_deployed(env, platform):
    """Test verifying before deploying exits with status 1."""
    result = runner.invoke(app, ["verify", "AdamCoefficients", "systemOwner", "--expected", "0x0"], env=env)
    assert result.exit_code == 1
    assert "has not been deployed" in result.output


def test_verify_requires_one_expectation(env, platform):
    """Test verify refuses to run without an expected value."""
    result = runner.invoke(app, ["verify", "AdamCoefficients", "systemOwner"], env=env)
    assert result.exit_code == 2


def test_deploy_production_is_a_no_op(env, platform):
    """Test production deploys nothing and writes no file."""
    result = runner.invoke(app, ["deploy", "production"], env=env)
    assert result.exit_code == 0
    assert "Nothing to deploy for 'production'." in result.output
    assert platform.calls == []


def test_deploy_failure(env):
    """Test a failed deployment exits with status 1 and saves nothing."""
    failing = InMemoryPlatform(fail_on={'UbexExchange'})
    with patch('deployment.cli.build_platform', return_value=failing):
        result = runner.invoke(app, ["deploy"], env=env)
    assert result.exit_code == 1
    assert "Deployment of UbexExchange failed" in result.output

    with pytest.raises(FileNotFoundError):
        open(env['DEPLOYMENT_FILE'])


def test_dry_run(env):
    """Test a dry run uses the in-memory platform and saves nothing."""
    result = runner.invoke(app, ["deploy", "--dry-run"], env=env)
    assert result.exit_code == 0, result.output
    assert "UbexExchange: 0x0000000000000000000000000000000000000004" in result.output
    assert "Dry run: addresses not saved." in result.output


def test_verify_against_component(env, platform):
    """Test the expected value can be another component's deployed address."""
    runner.invoke(app, ["deploy"], env=env)
    result = runner.invoke(app, ["verify", "AdamCoefficients", "systemOwner",
                                 "--expected-component", "SystemOwner"], env=env)
    assert result.exit_code == 0, result.output


def test_verify_unknown_accessor(env, platform):
    """Test an accessor the component lacks fails with a message and an alert."""
    runner.invoke(app, ["deploy"], env=env)
    with patch('deployment.cli.Notifier') as mock_notifier:
        result = runner.invoke(app, ["verify", "AdamCoefficients", "owner", "--expected", "1"], env=env)

    assert result.exit_code == 1
    assert "Error: Reading AdamCoefficients.owner() failed" in result.output
    mock_notifier.return_value.send_alert.assert_called_once()


def test_verify_expected_account(env, platform):
    """Test the expected value can be a node account picked by index."""
    runner.invoke(app, ["deploy"], env=env)
    with open(env['DEPLOYMENT_FILE']) as f:
        owner = json.load(f)['contracts']['SystemOwner']
    platform.w3 = MagicMock()
    platform.w3.eth.accounts = ['0x0000000000000000000000000000000000000d0d', owner]

    result = runner.invoke(app, ["verify", "AdamCoefficients", "systemOwner", "--expected-account", "1"], env=env)
    assert result.exit_code == 0, result.output
    assert f"OK: AdamCoefficients.systemOwner() == {owner}" in result.output


def test_verify_expected_account_out_of_range(env, platform):
    """Test an account index the node does not have is a usage error."""
    runner.invoke(app, ["deploy"], env=env)
    platform.w3 = MagicMock()
    platform.w3.eth.accounts = ['0x0000000000000000000000000000000000000d0d']

    result = runner.invoke(app, ["verify", "AdamCoefficients", "systemOwner", "--expected-account", "5"], env=env)
    assert result.exit_code == 2
    assert not isinstance(result.exception, IndexError)


def test_verify_corrupt_deployment_file(env, platform):
    """Test a truncated deployment file exits with status 1."""
    with open(env['DEPLOYMENT_FILE'], 'w') as f:
        f.write('{"contracts": {')
    result = runner.invoke(app, ["verify", "AdamCoefficients", "systemOwner", "--expected", "0x0"], env=env)
    assert result.exit_code == 1
    assert "is not valid JSON" in result.output


def test_each_run_logs_to_its_own_file(env, tmp_path):
    """Test a later invocation writes to the log file it was given."""
    runner.invoke(app, ["deploy", "--dry-run"], env=env)
    second_log = tmp_path / 'second.log'
    result = runner.invoke(app, ["deploy", "--dry-run"], env={**env, 'LOG_FILE': str(second_log)})

    assert result.exit_code == 0, result.output
    assert "Deploying 4 components for 'development'" in second_log.read_text()
