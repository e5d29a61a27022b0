"""Secret encryption CLI commands."""

from pathlib import Path

import click

from envvault.cli.output import (
    create_report_table,
    create_verification_table,
    mask_value,
)
from envvault.security import (
    CryptoConfig,
    CryptoService,
    EncryptionOrchestrator,
    EncryptionVerifier,
    EnvFileStorage,
    EnvFileStore,
    EnvVaultError,
    SecretKeyResolver,
    WireFormatCodec,
)

env_file_option = click.option(
    "--env-file",
    type=click.Path(dir_okay=False),
    default=None,
    help="Base env file holding secret keys (default: envs/.env)",
)


def _orchestrator(config: CryptoConfig) -> EncryptionOrchestrator:
    store = EnvFileStore(config)
    return EncryptionOrchestrator(
        service=CryptoService(config), store=store, storage=EnvFileStorage(store)
    )


@click.command("generate-key")
@click.argument("name")
@env_file_option
@click.option("--force", is_flag=True, help="Overwrite an existing key")
@click.option(
    "--show", is_flag=True, help="Display the generated key (use with caution)"
)
@click.pass_context
def generate_key_cmd(
    ctx: click.Context, name: str, env_file: str | None, force: bool, show: bool
) -> None:
    """Generate a secret key and store it in the base env file.

    NAME: Variable name for the key (e.g., 'PORTAL_SECRET_KEY')
    """
    console = ctx.obj["console"]
    resolver = SecretKeyResolver(base_env_file=env_file, use_keyring=False)
    try:
        secret = resolver.generate(name, overwrite=force)
    except FileExistsError as e:
        console.print(f"[yellow]{e}[/yellow] (use --force to replace it)")
        raise click.Abort()
    except (EnvVaultError, OSError) as e:
        console.print(f"[red]Error:[/red] {e}")
        raise click.Abort()

    console.print(
        f"[green]✓[/green] Secret key '{name}' stored in {resolver.base_env_file}"
    )
    if show:
        console.print(f"[cyan]{name}:[/cyan] {secret}")


@click.command("encrypt")
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
@click.option(
    "--key-name", required=True, help="Name of the secret key to encrypt with"
)
@click.option(
    "--var",
    "variables",
    multiple=True,
    help="Variable to encrypt (repeatable, default: all)",
)
@click.option(
    "--rotate", is_flag=True, help="Re-encrypt values that are already encrypted"
)
@click.option(
    "--new-key-name",
    default=None,
    help="Secret key to re-encrypt with when rotating",
)
@click.option("--strict", is_flag=True, help="Fail on duplicate keys in FILE")
@env_file_option
@click.pass_context
def encrypt_cmd(
    ctx: click.Context,
    file: str,
    key_name: str,
    variables: tuple[str, ...],
    rotate: bool,
    new_key_name: str | None,
    strict: bool,
    env_file: str | None,
) -> None:
    """Encrypt variables in an env file in place.

    FILE: Env file containing the variables to encrypt
    """
    console = ctx.obj["console"]
    config: CryptoConfig = ctx.obj["config"]
    if strict:
        config = config.model_copy(update={"strict_duplicates": True})
    if new_key_name and not rotate:
        console.print("[yellow]--new-key-name has no effect without --rotate[/yellow]")

    try:
        resolver = SecretKeyResolver(base_env_file=env_file)
        secret = resolver.resolve(key_name)
        new_secret = resolver.resolve(new_key_name) if rotate and new_key_name else None

        report = _orchestrator(config).encrypt_file(
            Path(file),
            secret,
            names=list(variables) or None,
            force_rotate=rotate,
            new_secret=new_secret,
        )
    except (EnvVaultError, OSError) as e:
        console.print(f"[red]Error:[/red] {e}")
        raise click.Abort()

    console.print(create_report_table(report))
    if report.written:
        console.print(
            f"[green]✓[/green] {report.changed} variables updated in {file}"
        )
    else:
        console.print("[yellow]No changes written[/yellow]")


@click.command("decrypt")
@click.argument("value")
@click.option(
    "--key-name", required=True, help="Name of the secret key to decrypt with"
)
@click.option(
    "--show", is_flag=True, help="Display the decrypted value (use with caution)"
)
@env_file_option
@click.pass_context
def decrypt_cmd(
    ctx: click.Context, value: str, key_name: str, show: bool, env_file: str | None
) -> None:
    """Decrypt a single ENC2: value.

    VALUE: Encrypted value to decrypt
    """
    console = ctx.obj["console"]
    try:
        secret = SecretKeyResolver(base_env_file=env_file).resolve(key_name)
        plaintext = CryptoService(ctx.obj["config"]).decrypt(value, secret)
    except (EnvVaultError, OSError) as e:
        console.print(f"[red]Error:[/red] {e}")
        raise click.Abort()

    if show:
        console.print(plaintext, markup=False, highlight=False)
    else:
        console.print(f"{mask_value(plaintext)} (use --show to display value)")


@click.command("verify")
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
@click.option(
    "--var", "variables", multiple=True, required=True, help="Variable to check"
)
@click.pass_context
def verify_cmd(ctx: click.Context, file: str, variables: tuple[str, ...]) -> None:
    """Check that variables in an env file are encrypted.

    FILE: Env file to inspect
    """
    console = ctx.obj["console"]
    config: CryptoConfig = ctx.obj["config"]
    store = EnvFileStore(config)
    try:
        lines = EnvFileStorage(store).read_lines(Path(file))
        results = EncryptionVerifier(store, WireFormatCodec(config)).validate(
            lines, list(variables)
        )
    except (EnvVaultError, OSError) as e:
        console.print(f"[red]Error:[/red] {e}")
        raise click.Abort()

    console.print(create_verification_table(results))
    if not all(results.values()):
        # Exit with error code if any value is plaintext
        raise click.Abort()


@click.command("check")
@click.argument("value")
@click.pass_context
def check_cmd(ctx: click.Context, value: str) -> None:
    """Report whether VALUE is in the encrypted format."""
    console = ctx.obj["console"]
    if WireFormatCodec(ctx.obj["config"]).is_encrypted(value):
        console.print("[green]✓[/green] Value is encrypted")
    else:
        console.print("[yellow]Value is not encrypted[/yellow]")
