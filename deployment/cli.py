"""
This file is the entry point for the 'ubex-deploy' command-line tool.
Run 'ubex-deploy --help' in your shell to use the CLI.
"""

import json
import logging
from typing import Optional

import typer
from web3 import Web3

from .alerts import Notifier
from .config import Settings
from .errors import DeploymentError
from .harness import ExpectedState, VerificationHarness
from .orchestrator import Orchestrator
from .plans import resolve_plan
from .platform import InMemoryPlatform, Web3Platform, connect
from .registry import DeploymentDirectory

app = typer.Typer(help="Deploy and verify the Ubex contracts.")
logger = logging.getLogger("ubex-deploy")


def setup_logging(log_file: str):
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.FileHandler(log_file),
            logging.StreamHandler()
        ],
        force=True
    )


def build_platform(settings: Settings, dry_run: bool = False):
    if dry_run:
        return InMemoryPlatform()
    w3 = connect(settings)
    return Web3Platform(w3, settings.artifacts_dir, account=settings.deployer_account,
                        private_key=settings.private_key, gas=settings.gas)


def _fail(settings: Settings, error: Exception):
    logger.error(f"{type(error).__name__}: {error}")
    Notifier(settings).send_alert(str(error))
    typer.echo(f"Error: {error}", err=True)
    raise typer.Exit(code=1)


def _parse_expected(value: str):
    if Web3.is_address(value):
        return value
    try:
        return json.loads(value)
    except ValueError:
        return value


@app.callback()
def main(ctx: typer.Context):
    settings = Settings.from_env()
    setup_logging(settings.log_file)
    ctx.obj = settings


@app.command()
def plan(ctx: typer.Context,
         network: Optional[str] = typer.Argument(None, help="Environment to show the plan for")):
    """Show the components an environment deploys, in order."""
    settings: Settings = ctx.obj
    network = network or settings.network
    descriptors = resolve_plan(network)
    if not descriptors:
        typer.echo(f"Nothing to deploy for '{network}'.")
        return
    for position, descriptor in enumerate(descriptors, start=1):
        dependencies = ', '.join(descriptor.dependencies) or '-'
        typer.echo(f"{position}. {descriptor.name} (depends on: {dependencies})")


@app.command()
def deploy(ctx: typer.Context,
           network: Optional[str] = typer.Argument(None, help="Environment to deploy (default: DEPLOY_NETWORK)"),
           dry_run: bool = typer.Option(False, "--dry-run", help="Deploy to an in-memory platform and save nothing"),
           deployment_file: Optional[str] = typer.Option(None, help="Where to record deployed addresses")):
    """Deploy the plan of an environment and record the addresses."""
    settings: Settings = ctx.obj
    network = network or settings.network
    directory = DeploymentDirectory(deployment_file or settings.deployment_file)

    try:
        platform = build_platform(settings, dry_run)
        registry = Orchestrator(platform).run(network)
    except (DeploymentError, ConnectionError) as e:
        _fail(settings, e)

    if len(registry) == 0:
        typer.echo(f"Nothing to deploy for '{network}'.")
        return

    for name in registry:
        typer.echo(f"{name}: {registry[name]}")

    if dry_run:
        typer.echo("Dry run: addresses not saved.")
        return

    try:
        directory.save(registry, network, chain_id=settings.chain_id, deployer=getattr(platform, 'account', None))
    except DeploymentError as e:
        _fail(settings, e)

    typer.echo(f"Saved deployment to {directory.path}")


@app.command()
def verify(ctx: typer.Context,
           component: str = typer.Argument(..., help="Deployed component to check"),
           accessor: str = typer.Argument(..., help="Read-only accessor to call"),
           expected: Optional[str] = typer.Option(None, help="Expected value"),
           expected_account: Optional[int] = typer.Option(None, help="Expect the node account with this index"),
           expected_component: Optional[str] = typer.Option(None, help="Expect the deployed address of this component"),
           deployment_file: Optional[str] = typer.Option(None, help="Deployment record to read")):
    """Check one piece of state of a deployed component."""
    settings: Settings = ctx.obj
    if sum(option is not None for option in (expected, expected_account, expected_component)) != 1:
        typer.echo("Error: pass exactly one of --expected, --expected-account or --expected-component", err=True)
        raise typer.Exit(code=2)

    directory = DeploymentDirectory(deployment_file or settings.deployment_file)
    try:
        platform = build_platform(settings)
        harness = VerificationHarness(platform, directory)
        if expected_account is not None:
            accounts = platform.w3.eth.accounts
            if not 0 <= expected_account < len(accounts):
                raise typer.BadParameter(
                    f"node has {len(accounts)} accounts, no account {expected_account}",
                    param_hint="--expected-account")
            value = accounts[expected_account]
        elif expected_component is not None:
            value = harness.get_deployed_instance(expected_component).address
        else:
            value = _parse_expected(expected)
        harness.check(ExpectedState(component, accessor, value))
    except (DeploymentError, ConnectionError) as e:
        _fail(settings, e)

    typer.echo(f"OK: {component}.{accessor}() == {value}")


if __name__ == "__main__":
    app()
