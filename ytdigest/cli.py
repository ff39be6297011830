"""ytdigest CLI — simple command-line interface.

Usage:
    ytdigest --url "https://youtube.com/watch?v=abc"
    ytdigest --batch "https://youtu.be/abc" --batch "https://youtu.be/def" --no-save
    ytdigest --chapters-from description.txt --duration PT15M
    ytdigest --render saved-digest.json
"""

from __future__ import annotations

import json
import logging
import sys
from dataclasses import replace
from pathlib import Path
from typing import Optional

import typer
from pydantic import ValidationError

from .chapters import extract_chapters
from .config import load_settings
from .errors import DigestError, MalformedTimestamp
from .interleave import upgrade_tangents
from .renderer import format_markdown
from .schemas import DigestResult

app = typer.Typer(add_completion=False, pretty_exceptions_enable=False)


def _fail(message: str) -> None:
    typer.echo(f"Error: {message}", err=True)
    raise typer.Exit(1)


def _show_chapters(path: Path, duration: str) -> None:
    description = path.read_text(encoding="utf-8")
    chapters = extract_chapters(description, duration)
    if chapters is None:
        typer.echo("No valid creator chapters (need 3+, first at 0:00, and a duration).")
        raise typer.Exit()
    for ch in chapters:
        typer.echo(f"{ch.timestamp_start:>8} - {ch.timestamp_end:<8} {ch.title}")


def _render_saved(path: Path) -> None:
    try:
        saved = DigestResult.model_validate_json(path.read_text(encoding="utf-8"))
    except OSError as exc:
        _fail(f"Cannot read {path}: {exc}")
        return
    except ValidationError as exc:
        _fail(f"{path} is not a saved digest: {exc}")
        return
    try:
        digest = upgrade_tangents(saved.digest)
        markdown = format_markdown(saved.metadata, digest, saved.has_creator_chapters)
    except MalformedTimestamp as exc:
        _fail(f"{path}: {exc}")
        return
    typer.echo(markdown)


@app.command()
def main(
    url: Optional[str] = typer.Option(None, help="YouTube video URL to digest"),
    batch: Optional[list[str]] = typer.Option(None, help="Several URLs to digest in parallel"),
    raw: bool = typer.Option(False, "--raw", help="Print the digest as JSON instead of Markdown"),
    no_save: bool = typer.Option(False, "--no-save", help="Don't write the Markdown file"),
    out: Optional[Path] = typer.Option(None, "--out", help="Output directory (default: DIGEST_OUTPUT_DIR or ./outputs)"),
    chapters_from: Optional[Path] = typer.Option(None, "--chapters-from", help="Preview creator chapters parsed from a description file"),
    duration: str = typer.Option("", "--duration", help="ISO-8601 video duration for --chapters-from, e.g. PT15M"),
    render: Optional[Path] = typer.Option(None, "--render", help="Render a saved digest JSON file as Markdown"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log pipeline progress to stderr"),
) -> None:
    """Structured digests of YouTube videos."""
    if hasattr(sys.stdout, "reconfigure"):
        sys.stdout.reconfigure(encoding="utf-8")
    if verbose:
        logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    if chapters_from:
        _show_chapters(chapters_from, duration)
        raise typer.Exit()

    if render:
        _render_saved(render)
        raise typer.Exit()

    settings = load_settings()
    if out:
        settings = replace(settings, output_dir=out)

    # ── Batch mode ────────────────────────────────────────────────
    if batch:
        from .service import digest_batch

        typer.echo(f"Digesting {len(batch)} videos...\n", err=True)
        results = digest_batch(batch, settings=settings, save=not no_save)
        failed = False
        for i, (item_url, result) in enumerate(zip(batch, results), 1):
            typer.echo(f"{'─' * 50}")
            typer.echo(f"[{i}/{len(batch)}] {item_url}")
            typer.echo(f"{'─' * 50}")
            if isinstance(result, str):
                failed = True
                typer.echo(result)
            elif raw:
                typer.echo(result.model_dump_json(by_alias=True, exclude_none=True, indent=2))
            else:
                typer.echo(result.output_path or result.digest.summary)
            typer.echo()
        raise typer.Exit(1 if failed else 0)

    # ── Single URL mode ───────────────────────────────────────────
    if not url:
        _fail("--url or --batch is required.\n"
              "  ytdigest --url 'https://www.youtube.com/watch?v=VIDEO_ID'")

    from .service import create_digest

    try:
        result = create_digest(url, settings=settings, save=not no_save)
    except DigestError as exc:
        _fail(str(exc))
        return

    if raw:
        typer.echo(json.dumps(result.model_dump(by_alias=True, exclude_none=True), indent=2, ensure_ascii=False))
        return

    if result.output_path:
        typer.echo(f"Saved to: {result.output_path}\n", err=True)
    typer.echo(format_markdown(result.metadata, result.digest, result.has_creator_chapters))


if __name__ == "__main__":
    app()
