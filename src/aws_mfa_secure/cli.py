"""Command-line interface for aws-mfa-secure."""

import logging
import os
import shlex
import subprocess
import sys
from pathlib import Path
from typing import Optional, Tuple

import click
from dotenv import load_dotenv

from . import __version__
from .config import load_settings
from .credentials.cache import CachedSession
from .credentials.manager import MfaSessionManager
from .credentials.prompt import TOKEN_ENV_VAR
from .errors import AwsCliNotFoundError, CacheCorruptError, MfaSecureError


logger = logging.getLogger(__name__)

SESSION_VARS = ("AWS_ACCESS_KEY_ID", "AWS_SECRET_ACCESS_KEY", "AWS_SESSION_TOKEN")


def _get_manager(ctx: click.Context) -> MfaSessionManager:
    manager = ctx.obj.get("manager")
    if manager is None:
        manager = MfaSessionManager(load_settings(ctx.obj.get("config")))
        ctx.obj["manager"] = manager
    return manager


def _fail(error: Exception) -> None:
    click.echo(f"Error: {error}", err=True)
    sys.exit(1)


def _ensure_credentials(ctx: click.Context, manager: MfaSessionManager) -> CachedSession:
    """Return valid session credentials, exiting with 1 when MFA gave up."""
    acquisition = manager.ensure_session()
    if not acquisition.succeeded:
        ctx.exit(1)
    return acquisition.credentials


@click.group()
@click.option('--debug', is_flag=True, help='Enable debug logging')
@click.option('--config', '-c', type=click.Path(path_type=Path), default=None, help='Settings file path')
@click.pass_context
def main(ctx: click.Context, debug: bool, config: Optional[Path]):
    """aws-mfa-secure - reuse MFA session credentials until they expire."""
    level = logging.DEBUG if debug else logging.WARNING
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
    load_dotenv()
    ctx.ensure_object(dict)
    ctx.obj.setdefault("config", config)


@main.command(context_settings={"ignore_unknown_options": True, "allow_interspersed_args": False})
@click.argument('aws_args', nargs=-1, type=click.UNPROCESSED)
@click.pass_context
def session(ctx: click.Context, aws_args: Tuple[str, ...]):
    """Run an aws cli command with MFA session credentials.

    Profiles that do not need MFA are passed through to aws unchanged.
    """
    credentials = None
    try:
        manager = _get_manager(ctx)
        if manager.is_mfa_required():
            credentials = _ensure_credentials(ctx, manager)
    except MfaSecureError as e:
        _fail(e)

    # taken after the one-time code was consumed
    env = os.environ.copy()
    env.pop(TOKEN_ENV_VAR, None)
    if credentials is not None:
        env.update(manager.session_environment(credentials))

    command = [manager.settings.aws_cli, *aws_args]
    logger.debug(f"Running {shlex.join(command)}")
    try:
        result = subprocess.run(command, env=env)
    except FileNotFoundError:
        _fail(AwsCliNotFoundError(manager.settings.aws_cli))
    ctx.exit(result.returncode)


@main.command()
@click.pass_context
def exports(ctx: click.Context):
    """Print export statements for the MFA session.

    Usage: eval "$(aws-mfa-secure exports)"
    """
    try:
        manager = _get_manager(ctx)
        if not manager.is_mfa_required():
            logger.info(f"Profile '{manager.profile}' does not need MFA, nothing to export")
            return
        credentials = _ensure_credentials(ctx, manager)
    except MfaSecureError as e:
        _fail(e)

    for name, value in manager.session_environment(credentials).items():
        click.echo(f"export {name}={shlex.quote(value)}")


@main.command()
def unsets():
    """Print the statement that removes session variables from a shell."""
    click.echo(f"unset {' '.join(SESSION_VARS)}")


@main.command()
@click.pass_context
def status(ctx: click.Context):
    """Show the MFA session state of the current profile."""
    try:
        manager = _get_manager(ctx)
        click.echo(f"Profile: {manager.profile}")
        click.echo(f"MFA device: {manager.mfa_serial or '-'}")
        click.echo(f"MFA required: {'yes' if manager.is_mfa_required() else 'no'}")
    except MfaSecureError as e:
        _fail(e)

    click.echo(f"Session cache: {manager.cache.path}")
    if not manager.cache.exists():
        click.echo("Session: missing")
        return

    try:
        cached = manager.load()
        click.echo(f"Expiration: {cached.expiration}")
        state = "valid" if manager.has_valid_cache() else "expired"
    except CacheCorruptError as e:
        state = f"corrupt ({e.reason})"
    click.echo(f"Session: {state}")


@main.command()
def version():
    """Print the aws-mfa-secure version."""
    click.echo(__version__)


if __name__ == "__main__":
    main()
