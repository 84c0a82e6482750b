"""Command-line interface for intent-match.

Uses Typer for a modern, type-hinted CLI experience.
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Annotated, Optional

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.markup import escape
from rich.table import Table

# Local .env may set INTENT_MATCH_CONFIG / INTENT_MATCH_THRESHOLD
load_dotenv()

from intent_match import __version__
from intent_match.config import (
    CONFIG_ENV_VAR,
    IntentMatchConfig,
    apply_env_overrides,
    load_config,
    with_threshold,
)
from intent_match.corrections.processor import CorrectionProcessor
from intent_match.corrections.table import CorrectionTable
from intent_match.errors import IntentMatchError, format_error_for_display
from intent_match.logging import LogLevel, set_verbosity
from intent_match.pipeline import IntentPipeline, ResolutionStatus
from intent_match.tables import load_corrections, load_phrases

app = typer.Typer(
    name="intent-match",
    help="Resolve transcribed utterances to intents from a fixed phrase list.",
    add_completion=False,
    rich_markup_mode="rich",
)

console = Console()

EXIT_NO_MATCH = 1
EXIT_ERROR = 2

PhrasesOption = Annotated[
    Optional[Path],
    typer.Option("--phrases", "-p", help="Phrases JSON file (overrides config)"),
]
CorrectionsOption = Annotated[
    Optional[Path],
    typer.Option("--corrections", "-c", help="Corrections JSON file (overrides config)"),
]
ConfigOption = Annotated[
    Optional[Path],
    typer.Option("--config", help=f"Config JSON file (default: ${CONFIG_ENV_VAR})"),
]
ThresholdOption = Annotated[
    Optional[float],
    typer.Option("--threshold", "-t", help="Largest accepted raw score, 0-1 (lower = stricter)"),
]
VerboseOption = Annotated[
    bool,
    typer.Option("--verbose", help="Log corrected input and match decisions"),
]


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"intent-match version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        Optional[bool],
        typer.Option(
            "--version",
            "-v",
            help="Show version and exit.",
            callback=version_callback,
            is_eager=True,
        ),
    ] = None,
) -> None:
    """Intent Match - fuzzy intent resolution for voice commands.

    Applies [bold]corrections[/bold] for known transcription mistakes, then
    fuzzy-matches the result against a [bold]phrase list[/bold].
    """
    pass


def _fail(error: Exception) -> typer.Exit:
    console.print(f"[red]Error:[/red] {escape(format_error_for_display(error))}")
    return typer.Exit(EXIT_ERROR)


def _load_settings(config_path: Path | None, threshold: float | None) -> tuple[IntentMatchConfig, Path]:
    """Load config and apply overrides.

    Returns:
        Tuple of (config, directory relative table paths resolve against)
    """
    if config_path is None and os.environ.get(CONFIG_ENV_VAR):
        config_path = Path(os.environ[CONFIG_ENV_VAR])

    if config_path is not None:
        config = load_config(config_path)
        base_dir = config_path.resolve().parent
    else:
        config = IntentMatchConfig()
        base_dir = Path.cwd()

    config = apply_env_overrides(config)
    if threshold is not None:
        config = with_threshold(config, threshold)

    return config, base_dir


def _build_pipeline(
    phrases: Path | None,
    corrections: Path | None,
    config_path: Path | None,
    threshold: float | None,
    verbose: bool = False,
) -> IntentPipeline:
    if verbose:
        set_verbosity(LogLevel.DEBUG)

    try:
        config, base_dir = _load_settings(config_path, threshold)

        phrases_path = phrases or config.resolve_path(config.phrases_file, base_dir)
        if phrases_path is None:
            console.print("[red]Error:[/red] No phrases file given.")
            console.print("Pass --phrases or set phrases_file in the config.")
            raise typer.Exit(EXIT_ERROR)

        corrections_path = corrections or config.resolve_path(config.corrections_file, base_dir)
        table = load_corrections(corrections_path) if corrections_path else CorrectionTable()
        corpus = load_phrases(phrases_path)

        return IntentPipeline.from_config(config, table, corpus)
    except IntentMatchError as e:
        raise _fail(e) from e


@app.command()
def resolve(
    text: Annotated[str, typer.Argument(help="Transcribed utterance to resolve")],
    phrases: PhrasesOption = None,
    corrections: CorrectionsOption = None,
    config: ConfigOption = None,
    threshold: ThresholdOption = None,
    as_json: Annotated[
        bool,
        typer.Option("--json", "-j", help="Print the result as a JSON message"),
    ] = False,
    verbose: VerboseOption = False,
) -> None:
    """Resolve an utterance to a single intent.

    Exits with status 1 when nothing matches.
    """
    pipeline = _build_pipeline(phrases, corrections, config, threshold, verbose)
    result = pipeline.resolve(text)

    if as_json:
        message = result.intent.to_message() if result.intent else None
        typer.echo(json.dumps(message))
    elif result.matched:
        intent = result.intent
        console.print(
            f"[green]{intent.payload_key}[/green] "
            f"({intent.intent_type}/{intent.item}) "
            f"confidence [bold]{intent.confidence}[/bold]"
        )
        if result.normalized_text != result.raw_text:
            console.print(f"[dim]Corrected input: {escape(result.normalized_text)}[/dim]")
    elif result.status is ResolutionStatus.EMPTY_INPUT:
        console.print("[yellow]No match[/yellow] (empty input)")
    else:
        console.print(f"[yellow]No match[/yellow] for '{escape(result.normalized_text)}'")

    if not result.matched:
        raise typer.Exit(EXIT_NO_MATCH)


@app.command()
def rank(
    text: Annotated[str, typer.Argument(help="Transcribed utterance to score")],
    phrases: PhrasesOption = None,
    corrections: CorrectionsOption = None,
    config: ConfigOption = None,
    threshold: ThresholdOption = None,
    limit: Annotated[
        int,
        typer.Option("--limit", "-n", min=1, help="Maximum number of candidates"),
    ] = 5,
    verbose: VerboseOption = False,
) -> None:
    """Show the best-scoring phrases for an utterance."""
    pipeline = _build_pipeline(phrases, corrections, config, threshold, verbose)
    normalized = pipeline.normalize(text)
    candidates = pipeline.rank(text, limit=limit)

    if not candidates:
        console.print("[yellow]Nothing to rank[/yellow]")
        return

    table = Table(title=f"Candidates for '{escape(normalized)}' (threshold {pipeline.threshold})")
    table.add_column("#", style="dim", width=3)
    table.add_column("Key", style="cyan")
    table.add_column("Phrase", style="white")
    table.add_column("Score", justify="right")
    table.add_column("Confidence", justify="right")

    for i, candidate in enumerate(candidates, 1):
        within = candidate.raw_score <= pipeline.threshold
        style = "green" if within else "dim"
        table.add_row(
            str(i),
            candidate.entry.key,
            escape(candidate.entry.reference_text),
            f"[{style}]{candidate.raw_score:.3f}[/{style}]",
            f"[{style}]{candidate.confidence}[/{style}]",
        )

    console.print(table)


@app.command()
def normalize(
    text: Annotated[str, typer.Argument(help="Transcribed utterance to correct")],
    corrections: CorrectionsOption = None,
    config: ConfigOption = None,
) -> None:
    """Apply corrections to an utterance and list each substitution."""
    try:
        settings, base_dir = _load_settings(config, None)
        corrections_path = corrections or settings.resolve_path(settings.corrections_file, base_dir)
        table = load_corrections(corrections_path) if corrections_path else CorrectionTable()
    except IntentMatchError as e:
        raise _fail(e) from e

    corrected, log = CorrectionProcessor().correct(text, table)
    console.print(escape(corrected))

    for c in log:
        console.print(f'  [dim]"{escape(c.original)}" -> "{escape(c.corrected)}" at {c.position}[/dim]')
    console.print(f"[dim]{len(log)} corrections[/dim]")


@app.command()
def check(
    phrases: PhrasesOption = None,
    corrections: CorrectionsOption = None,
    config: ConfigOption = None,
) -> None:
    """Validate the phrase and correction tables."""
    pipeline = _build_pipeline(phrases, corrections, config, None)

    console.print(f"[green]OK[/green] {len(pipeline.corpus)} phrases, {len(pipeline.corrections)} corrections")
    intent_types = pipeline.corpus.intent_types()
    if intent_types:
        console.print(f"Intent types: {', '.join(intent_types)}")
    console.print(f"Match threshold: {pipeline.threshold}")


if __name__ == "__main__":
    app()
