"""CLI entry point."""

import logging

import click
from rich.console import Console
from rich.logging import RichHandler

from envvault import __version__
from envvault.cli.commands.secrets import (
    check_cmd,
    decrypt_cmd,
    encrypt_cmd,
    generate_key_cmd,
    verify_cmd,
)
from envvault.security.config import CryptoConfig

console = Console()


def configure_logging(verbose: bool) -> None:
    """Route library logging through Rich.

    Args:
        verbose: Log at DEBUG instead of WARNING.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


@click.group()
@click.version_option(version=__version__, prog_name="envvault")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """Encrypt secrets inside environment files.

    Values are encrypted with AES-256-GCM under keys derived from a secret
    key with Argon2id, and stored as ENC2: strings in place.
    """
    configure_logging(verbose)

    ctx.ensure_object(dict)
    ctx.obj.setdefault("config", CryptoConfig())
    ctx.obj.setdefault("console", console)


cli.add_command(generate_key_cmd, "generate-key")
cli.add_command(encrypt_cmd, "encrypt")
cli.add_command(decrypt_cmd, "decrypt")
cli.add_command(verify_cmd, "verify")
cli.add_command(check_cmd, "check")
