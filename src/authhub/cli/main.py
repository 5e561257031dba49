"""Main CLI application.

This is the entry point for the authhub CLI.
"""

from pathlib import Path
from typing import Annotated

import typer

from authhub.cli.common import (
    NEON_CYAN,
    console,
    create_table,
    error,
    format_level,
    info,
    run_async,
    success,
    warn,
)
from authhub.config import settings
from authhub.log_config import configure_logging
from authhub.remember_me import TOKEN_KEY, RememberMeStore
from authhub.security import (
    FileUploadValidation,
    PasswordStrength,
    SecurityVulnerability,
    classify_password_strength,
    classify_vulnerability,
    generate_csrf_token,
    generate_secure_token,
    hash_data,
    password_suggestions,
    sanitize_input,
    validate_file_upload,
    verify_hashed_data,
)
from authhub.security.passwords import password_score
from authhub.storage import FileSecretStorage

app = typer.Typer(
    name="authhub",
    help="authhub - authentication toolkit",
    add_completion=False,
    no_args_is_help=True,
)

remember_me_app = typer.Typer(help="Inspect the stored remember-me credential")
app.add_typer(remember_me_app, name="remember-me")

StoreOption = Annotated[
    Path | None,
    typer.Option("--store", help="Secret store file (defaults to AUTHHUB_SECRET_STORE_PATH)"),
]


@app.callback()
def root(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logs"),
) -> None:
    configure_logging("DEBUG" if verbose else "WARNING")


# ============================================================================
# Security primitives
# ============================================================================


@app.command()
def strength(password: str = typer.Argument(..., help="Password to score")) -> None:
    """Classify a password as weak, medium or strong."""
    level = classify_password_strength(password)

    table = create_table("Password Strength", "Metric", "Value")
    table.add_row(
        "Strength",
        format_level(level.value, PasswordStrength.STRONG.value, (PasswordStrength.WEAK.value,)),
    )
    table.add_row("Score", str(password_score(password)))
    table.add_row("Length", str(len(password)))
    console.print(table)

    for suggestion in password_suggestions(password):
        info(suggestion)


@app.command()
def scan(text: str = typer.Argument(..., help="Input to screen")) -> None:
    """Screen input for injection patterns. Exits 1 when something matches."""
    result = classify_vulnerability(text)
    if result is SecurityVulnerability.NONE:
        success("No injection pattern detected")
        return
    error(f"Detected: {result.value}")
    raise typer.Exit(1)


@app.command()
def sanitize(text: str = typer.Argument(..., help="Input to clean")) -> None:
    """Strip markup and unsafe characters."""
    typer.echo(sanitize_input(text))


@app.command("hash")
def hash_cmd(
    data: str = typer.Argument(..., help="Secret to hash"),
    salt: str | None = typer.Option(None, "--salt", "-s", help="Fixed salt (random if omitted)"),
) -> None:
    """Print ``salt:digest`` for a secret."""
    try:
        typer.echo(hash_data(data, salt))
    except ValueError as e:
        error(str(e))
        raise typer.Exit(1) from None


@app.command()
def verify(
    data: str = typer.Argument(..., help="Secret to check"),
    hashed: str = typer.Argument(..., help="Stored salt:digest value"),
) -> None:
    """Check a secret against a stored hash. Exits 1 on mismatch."""
    if verify_hashed_data(data, hashed):
        success("Match")
        return
    error("No match")
    raise typer.Exit(1)


@app.command()
def token(
    length: int = typer.Option(32, "--length", "-n", min=1, help="Token length"),
    csrf: bool = typer.Option(False, "--csrf", help="Generate a CSRF token"),
) -> None:
    """Generate a URL-safe random token."""
    typer.echo(generate_csrf_token() if csrf else generate_secure_token(length))


@app.command("check-upload")
def check_upload(
    file_name: str = typer.Argument(..., help="Uploaded file name"),
    size: int = typer.Argument(..., min=0, help="Size in bytes"),
    mime_type: str = typer.Argument(..., help="Declared MIME type"),
) -> None:
    """Validate an upload against the configured policy. Exits 1 when rejected."""
    result = validate_file_upload(file_name, size, mime_type, settings.upload_policy())
    if result is FileUploadValidation.VALID:
        success(f"{file_name} accepted")
        return
    error(f"{file_name} rejected: {result.value}")
    raise typer.Exit(1)


# ============================================================================
# Remember-me
# ============================================================================


def _store(path: Path | None) -> tuple[RememberMeStore, FileSecretStorage]:
    storage = FileSecretStorage(path or settings.secret_store_path)
    return RememberMeStore(storage, duration=settings.remember_me_duration), storage


@remember_me_app.command("status")
def remember_me_status(store: StoreOption = None) -> None:
    """Show the remember-me credential, evicting it if expired."""
    tokens, storage = _store(store)

    @run_async
    async def _status() -> None:
        credential = await tokens.fetch()
        if credential is None:
            warn(f"No valid remember-me credential in {storage.path}")
            return

        table = create_table("Remember Me", "Field", "Value")
        table.add_row("Owner", credential.owner_id)
        table.add_row("Created", credential.created_at.isoformat())
        table.add_row("Expires", credential.expires_at.isoformat())
        table.add_row("Device", credential.device_fingerprint)
        console.print(table)

    _status()


@remember_me_app.command("clear")
def remember_me_clear(
    store: StoreOption = None,
    clear_all: bool = typer.Option(False, "--all", help="Wipe every stored secret"),
) -> None:
    """Delete the remember-me credential."""
    tokens, storage = _store(store)

    @run_async
    async def _clear() -> None:
        if clear_all:
            await tokens.clear_all()
            success(f"Cleared all secrets in {storage.path}")
            return
        await tokens.clear()
        success(f"Cleared [{NEON_CYAN}]{TOKEN_KEY}[/{NEON_CYAN}]")

    _clear()


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
