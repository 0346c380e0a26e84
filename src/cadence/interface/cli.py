"""cadence CLI — scheduling, session selection, config and server commands."""

import json
import logging
import sys
from pathlib import Path
from typing import Annotated

import typer

from cadence.application.config import config_file_candidates, resolve_config
from cadence.interface._common import _resolve_with_overrides, card_to_dict, load_cards

# ---------------------------------------------------------------------------
# Root app
# ---------------------------------------------------------------------------

app = typer.Typer(
    help="cadence: spaced-repetition scheduling for flashcard study sessions.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

config_app = typer.Typer(help="Manage cadence configuration.")
app.add_typer(config_app, name="config")

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

logging.basicConfig(
    level=logging.INFO,
    format="%(levelname)s:%(name)s:%(message)s",
    stream=sys.stderr,
)
logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Global callback
# ---------------------------------------------------------------------------


@app.callback()
def main_callback(
    verbose: Annotated[
        int,
        typer.Option(
            "--verbose", "-v", count=True, help="Increase verbosity. Repeat for more detail."
        ),
    ] = 1,
):
    """Global settings for cadence."""
    # A single -v is the default and must not mask CADENCE_VERBOSE
    config = _resolve_with_overrides(verbose=verbose if verbose > 1 else None)
    logging.getLogger("cadence").setLevel(config.effective_log_level)


# ---------------------------------------------------------------------------
# Scheduling
# ---------------------------------------------------------------------------


@app.command()
def schedule(
    grade: Annotated[int, typer.Option("--grade", "-g", help="Recall grade, 0 (fail) to 5.")],
    ease: Annotated[float | None, typer.Option(help="Prior ease factor.")] = None,
    repetitions: Annotated[
        int | None, typer.Option(help="Prior consecutive successes.")
    ] = None,
    interval: Annotated[float | None, typer.Option(help="Prior interval in minutes.")] = None,
    response_avg: Annotated[
        float | None, typer.Option(help="Prior average response time (ms).")
    ] = None,
    confidence_avg: Annotated[
        float | None, typer.Option(help="Prior average confidence (0-1).")
    ] = None,
    response_ms: Annotated[
        float | None, typer.Option("--response-ms", help="Time taken to answer (ms).")
    ] = None,
    confidence: Annotated[
        float | None, typer.Option(help="Self-rated confidence (0-1).")
    ] = None,
    now: Annotated[
        str | None, typer.Option(help="Review time as ISO-8601. Defaults to the current time.")
    ] = None,
    json_output: Annotated[bool, typer.Option("--json", help="Output as JSON.")] = False,
):
    """[bold green]Schedule[/bold green] the next review of one card.

    Without any prior-state option the card is treated as never reviewed.
    """
    from datetime import datetime, timezone

    from cadence.application.scheduler import schedule_next_review
    from cadence.domain.models import ProgressState, ReviewOutcome, parse_iso

    try:
        review_time = parse_iso(now) if now else datetime.now(timezone.utc)
    except ValueError as e:
        typer.secho(f"Invalid --now timestamp: {e}", fg="red", err=True)
        raise typer.Exit(1) from e

    prior_fields = {
        "ease_factor": ease,
        "repetitions": repetitions,
        "interval_minutes": interval,
        "response_ms_avg": response_avg,
        "confidence_avg": confidence_avg,
    }
    prior_fields = {k: v for k, v in prior_fields.items() if v is not None}
    prior = ProgressState(**prior_fields) if prior_fields else None

    outcome = ReviewOutcome(grade=grade, response_ms=response_ms, confidence=confidence)
    result = schedule_next_review(review_time, prior, outcome)

    if json_output:
        typer.echo(json.dumps(result.to_dict(), indent=2))
        return

    state = result.state
    outcome_label = "fail" if outcome.is_failure else "pass"
    typer.echo(f"Grade {grade} ({outcome_label})")
    typer.echo(f"Ease factor: {state.ease_factor:.2f}")
    typer.echo(f"Repetitions: {state.repetitions}")
    typer.echo(f"Interval: {result.next_interval_minutes:g} min")
    typer.secho(f"Next due: {result.next_due_at_iso}", fg="green")


# ---------------------------------------------------------------------------
# Sessions
# ---------------------------------------------------------------------------


@app.command()
def session(
    path: Annotated[
        Path, typer.Argument(help="YAML or JSON file listing candidate cards.", exists=True)
    ],
    cap: Annotated[
        int | None, typer.Option("--cap", help="Session size. Defaults to config daily_cap.")
    ] = None,
    order: Annotated[
        bool,
        typer.Option(
            "--order/--no-order",
            help="Sort learn -> recognize -> know by due time first. "
            "Use --no-order when the file is already sorted.",
        ),
    ] = True,
    json_output: Annotated[bool, typer.Option("--json", help="Output as JSON.")] = False,
):
    """Select the cards for one study session from a candidate file."""
    from cadence.application.session import order_session_pool, select_session_cards

    config = _resolve_with_overrides(daily_cap=cap)

    try:
        cards = load_cards(path)
    except (ValueError, OSError) as e:
        typer.secho(f"Could not read cards: {e}", fg="red", err=True)
        raise typer.Exit(1) from e

    pool = order_session_pool(cards) if order else cards
    selected = select_session_cards(pool, config.daily_cap)
    logger.debug(f"Selected {len(selected)} of {len(cards)} cards (cap {config.daily_cap})")

    if json_output:
        typer.echo(json.dumps([card_to_dict(c) for c in selected], indent=2))
        return

    typer.echo(f"Candidates: {len(cards)}  Cap: {config.daily_cap}  Selected: {len(selected)}")
    for i, card in enumerate(selected, start=1):
        due = card_to_dict(card)["due_at"] or "-"
        label = f"  {card.term}" if card.term else ""
        typer.echo(f"  [{i}] {card.card_id}  {card.stage}  due {due}{label}")


@app.command("new-limit")
def new_limit(
    total_new: Annotated[int, typer.Argument(help="Never-seen cards available.")],
    cap: Annotated[
        int | None, typer.Option("--cap", help="Daily new-card cap. Defaults to config.")
    ] = None,
):
    """How many new cards to mix into today's reviews."""
    from cadence.application.session import pick_daily_new_limit

    config = _resolve_with_overrides(new_card_cap=cap)
    typer.echo(pick_daily_new_limit(total_new, config.new_card_cap))


# ---------------------------------------------------------------------------
# Server
# ---------------------------------------------------------------------------


@app.command()
def serve(
    port: Annotated[int | None, typer.Option(help="Port to bind the server to.")] = None,
    host: Annotated[str | None, typer.Option(help="Host to bind the server to.")] = None,
    reload: Annotated[bool, typer.Option(help="Enable auto-reload.")] = False,
):
    """Run the scheduling HTTP service."""
    import uvicorn

    config = _resolve_with_overrides(host=host, port=port)
    uvicorn.run("cadence.server:app", host=config.host, port=config.port, reload=reload)


# ---------------------------------------------------------------------------
# Config subgroup
# ---------------------------------------------------------------------------


@config_app.command("show")
def config_show():
    """Display final resolved configuration."""
    config = resolve_config()
    d = {k: str(v) if isinstance(v, Path) else v for k, v in config.model_dump().items()}
    typer.echo(json.dumps(d, indent=2))


@config_app.command("path")
def config_path():
    """Show where cadence looks for its config file."""
    for candidate in config_file_candidates():
        marker = "found" if candidate.exists() else "missing"
        typer.echo(f"{candidate}  ({marker})")
