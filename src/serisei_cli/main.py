from pathlib import Path

import typer
from loguru import logger
from serisei_formatter.engine import FormatterEngine
from serisei_formatter.file_utils import read_source, write_file_atomic
from serisei_formatter.rules import default_rules

from .config import load_config
from .logging_config import setup_logging

app = typer.Typer(help="Serisei - group imports and align type declarations in TypeScript files")


@app.command()
def main(
    file: Path = typer.Argument(None, help="TypeScript file to format in place"),
    check: bool = typer.Option(False, "--check", help="Exit with 1 if the file would change, without writing it"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging"),
):
    """Format the import block and type declarations of a file"""
    setup_logging("DEBUG" if verbose else "INFO")

    if file is None:
        typer.echo("Error: Provide a file to format")
        raise typer.Exit(code=1)
    if not file.exists():
        typer.echo(f"Error: File not found: {file}")
        raise typer.Exit(code=1)

    config = load_config(file)
    engine = FormatterEngine(config)
    for rule in default_rules(config):
        engine.add_rule(rule)

    try:
        source = read_source(file)
    except (OSError, UnicodeDecodeError) as e:
        typer.echo(f"Error: Cannot read {file}: {e}")
        raise typer.Exit(code=1)

    result = engine.format_string(source, str(file))
    for error in result.errors:
        logger.warning(f"{file}: {error}")

    if not result.modified:
        typer.echo(f"{file} already formatted")
        return

    if check:
        typer.echo(f"Would reformat {file}")
        raise typer.Exit(code=1)

    try:
        write_file_atomic(file, result.source)
    except OSError as e:
        logger.error(f"Error writing {file}: {e}")
        raise typer.Exit(code=1)
    typer.echo(f"Formatted {file}")


if __name__ == "__main__":
    app()
