"""Pgyer CLI - Main commands."""
import asyncio
import logging
import os
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from pgyerpy.core.api.config import API_KEY_ENV, PASSWORD_ENV, UploadSettings, parse_properties
from pgyerpy.core.exceptions import InputError

app = typer.Typer(
    name="pgyer",
    help="Upload Android builds to Pgyer",
    add_completion=False
)
console = Console(soft_wrap=True)


def run_async(coro):
    """Run async function."""
    return asyncio.run(coro)


def configure_logging(verbose: bool):
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(message)s",
            handlers=[RichHandler(console=console, show_path=False)],
        )


def load_settings(
    api_key: Optional[str],
    password: Optional[str],
    properties: Optional[Path],
) -> UploadSettings:
    """Options win over the environment, which wins over the properties file."""
    values = {}
    if properties is not None:
        values.update(parse_properties(properties.read_text(encoding="utf-8")))
    values.update({k: v for k, v in os.environ.items() if k in (API_KEY_ENV, PASSWORD_ENV) and v})
    return UploadSettings.from_mapping(values).merged(api_key=api_key, password=password)



@app.command()
def upload(
    path: Path = typer.Argument(..., help="APK file or build output directory"),
    api_key: str = typer.Option(None, "--api-key", "-k", help="Pgyer API key (default: $PGY_API_KEY)"),
    password: str = typer.Option(None, "--password", "-p", help="Download password (default: $PGY_DOWNLOAD_PASSWORD)"),
    properties: Path = typer.Option(None, "--properties", help="gradle.properties file with PGY_* keys"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
):
    """Upload a build to Pgyer."""
    from pgyerpy import PgyerClient
    
    configure_logging(verbose)
    
    async def do_upload():
        async with PgyerClient() as pgyer:
            try:
                settings = load_settings(api_key, password, properties)
                artifact = pgyer.resolve_artifact(path)
                with console.status(f"Uploading {artifact.name}..."):
                    return await pgyer.run(settings.api_key, settings.password, artifact)
            except (InputError, OSError) as e:
                console.print(f"[red]Upload failed: {escape(str(e))}[/red]")
                raise typer.Exit(1)
    
    outcome = run_async(do_upload())
    if outcome.is_success:
        console.print(f"[green]Upload succeeded:[/green] {escape(outcome.value)}")
    else:
        console.print(f"[red]Upload failed: {escape(outcome.cause)}[/red]")
        raise typer.Exit(1)


@app.command()
def resolve(
    path: Path = typer.Argument(..., help="APK file or build output directory"),
):
    """Show the artifact that would be uploaded."""
    from pgyerpy.core.upload import ArtifactResolver
    
    try:
        artifact = ArtifactResolver().resolve(path)
    except InputError as e:
        console.print(f"[red]{escape(str(e))}[/red]")
        raise typer.Exit(1)
    console.print(escape(str(artifact)))


def main():
    app()


if __name__ == "__main__":
    main()
