"""CLI interface using Typer."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import NoReturn, Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from weighttrend.config import get_settings, reload_settings
from weighttrend.config.settings import Settings
from weighttrend.milestones import (
    CelebrationKind,
    MilestoneInterval,
    calculate_progress,
    check_for_celebration,
    detect_crossed_milestones,
    generate_milestones,
)
from weighttrend.milestones.calculator import completed_weights
from weighttrend.snapshot import Snapshot, load_snapshot
from weighttrend.tracking import (
    calculate_daily_ewma,
    calculate_ewma,
    calculate_holt,
    exponential_moving_average,
    predict_goal_date,
    weekly_summaries,
    with_trend_rates,
)
from weighttrend.tracking.ema import sort_samples, span_to_smoothing
from weighttrend.tracking.summary import MAX_WEEKS, MONDAY, SUNDAY, WeeklyTrend
from weighttrend.units import WeightUnit, convert

app = typer.Typer(
    help="Weight trend smoothing, forecasting and milestone tracking",
    no_args_is_help=True,
)
console = Console()

WEEK_STARTS = {"sunday": SUNDAY, "monday": MONDAY}


# ============================================================================
# Helpers
# ============================================================================


def output_json(response: dict, file=None) -> None:
    """Output JSON response to stdout or file."""
    json_str = json.dumps(response, indent=2)
    if file:
        file.write(json_str)
    else:
        print(json_str)


def fail(message: str, command: str, json_output: bool) -> NoReturn:
    """Report an error in the selected output mode and exit with status 1."""
    if json_output:
        output_json({"success": False, "command": command, "errors": [message]})
    else:
        console.print(f"[red]{message}[/red]")
    raise typer.Exit(1)


def load_or_exit(path: Path, command: str, json_output: bool) -> Snapshot:
    """Load a snapshot file, exiting with a friendly message on failure."""
    try:
        return load_snapshot(path)
    except FileNotFoundError:
        fail(f"Snapshot file not found: {path}", command, json_output)
    except ValueError as e:
        fail(f"Invalid snapshot file: {e}", command, json_output)


def resolve_unit(unit: Optional[str], settings: Settings, command: str, json_output: bool) -> WeightUnit:
    if unit is None:
        return settings.preferences.unit
    try:
        return WeightUnit.parse(unit)
    except ValueError as e:
        fail(str(e), command, json_output)


def resolve_interval(
    interval: Optional[str], settings: Settings, command: str, json_output: bool
) -> MilestoneInterval:
    if interval is None:
        return settings.preferences.milestone_interval
    try:
        return MilestoneInterval.parse(interval)
    except ValueError as e:
        fail(str(e), command, json_output)


def resolve_goal_range(
    start: Optional[float],
    goal: Optional[float],
    settings: Settings,
    command: str,
    json_output: bool,
) -> tuple[float, float]:
    """Use explicit start/goal, falling back to configured preferences."""
    start = start if start is not None else settings.preferences.start_weight
    goal = goal if goal is not None else settings.preferences.goal_weight
    if start is None or goal is None:
        fail("Start and goal weights are required (--start/--goal or config)", command, json_output)
    return start, goal  # type: ignore[return-value]


def latest_weight(snapshot: Snapshot, unit: WeightUnit) -> Optional[float]:
    if not snapshot.samples:
        return None
    return sort_samples(snapshot.samples)[-1].weight_in(unit)


@app.callback()
def main(
    config: Optional[Path] = typer.Option(
        None, "--config", "-c", help="Path to config.yaml (default: ~/.weighttrend/config.yaml)"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    """Load settings and configure logging before any command."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")
    try:
        reload_settings(config)
    except ValueError as e:
        console.print(f"[red]Invalid config file: {e}[/red]")
        raise typer.Exit(1)


# ============================================================================
# Trend commands
# ============================================================================


@app.command()
def trend(
    snapshot_path: Path = typer.Argument(..., help="YAML snapshot with samples"),
    daily: bool = typer.Option(False, "--daily", help="Average same-day weigh-ins first"),
    smoothing: Optional[float] = typer.Option(
        None, "--lambda", "-l", help="Smoothing factor in (0, 1] (default from config, 0.1)"
    ),
    ema: bool = typer.Option(
        False, "--ema", help="Per-day EMA parameterised by span instead of λ"
    ),
    span: Optional[int] = typer.Option(
        None, "--span", help="EMA span in days (implies --ema, default from config, 10)"
    ),
    unit: Optional[str] = typer.Option(None, "--unit", "-u", help="Display unit: lb or kg"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Show the EWMA trend line for a weight history."""
    settings = get_settings()
    display_unit = resolve_unit(unit, settings, "trend", json_output)
    snapshot = load_or_exit(snapshot_path, "trend", json_output)
    smoothing = smoothing if smoothing is not None else settings.smoothing.ewma_lambda

    try:
        if ema or span is not None:
            span = span if span is not None else settings.smoothing.ema_span
            smoothing = span_to_smoothing(span)
            points = exponential_moving_average(snapshot.samples, span)
        elif daily:
            points = calculate_daily_ewma(snapshot.samples, smoothing)
        else:
            points = calculate_ewma(snapshot.samples, smoothing)
    except ValueError as e:
        fail(str(e), "trend", json_output)
    points = with_trend_rates(points)

    if json_output:
        output_json({
            "success": True,
            "command": "trend",
            "data": {
                "unit": display_unit.value,
                "smoothing": smoothing,
                "points": [
                    {
                        "date": p.date.isoformat(),
                        "raw": round(p.raw_weight_in(display_unit), 2),
                        "trend": round(p.smoothed_weight_in(display_unit), 2),
                        "rate_per_day": (
                            round(p.trend_rate_in(display_unit), 3)
                            if p.trend_rate is not None
                            else None
                        ),
                    }
                    for p in points
                ],
            },
        })
        return

    if not points:
        console.print("[yellow]No weigh-ins in snapshot[/yellow]")
        return

    table = Table(title=f"Weight trend (λ={smoothing:g})")
    table.add_column("Date")
    table.add_column(f"Weight ({display_unit.value})", justify="right")
    table.add_column(f"Trend ({display_unit.value})", justify="right")
    table.add_column("Rate/day", justify="right")

    for p in points:
        rate = p.trend_rate_in(display_unit)
        table.add_row(
            p.date.isoformat(),
            f"{p.raw_weight_in(display_unit):.1f}",
            f"{p.smoothed_weight_in(display_unit):.1f}",
            f"{rate:+.2f}" if rate is not None else "-",
        )

    console.print(table)


@app.command()
def forecast(
    snapshot_path: Path = typer.Argument(..., help="YAML snapshot with samples"),
    days: int = typer.Option(7, "--days", "-d", help="Days ahead to forecast"),
    unit: Optional[str] = typer.Option(None, "--unit", "-u", help="Display unit: lb or kg"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Forecast weight with Holt's double exponential smoothing."""
    settings = get_settings()
    display_unit = resolve_unit(unit, settings, "forecast", json_output)
    snapshot = load_or_exit(snapshot_path, "forecast", json_output)

    try:
        result = calculate_holt(
            snapshot.samples,
            alpha=settings.smoothing.holt_alpha,
            beta=settings.smoothing.holt_beta,
        )
    except ValueError as e:
        fail(str(e), "forecast", json_output)

    if result is None:
        fail("Need at least 2 weigh-ins to forecast", "forecast", json_output)

    level = convert(result.level, WeightUnit.LB, display_unit)
    daily_trend = convert(result.trend, WeightUnit.LB, display_unit)
    projected = convert(result.forecast(days), WeightUnit.LB, display_unit)

    if json_output:
        output_json({
            "success": True,
            "command": "forecast",
            "data": {
                "unit": display_unit.value,
                "level": round(level, 2),
                "trend_per_day": round(daily_trend, 3),
                "last_date": result.last_date.isoformat(),
                "days_ahead": days,
                "forecast": round(projected, 2),
            },
        })
        return

    u = display_unit.value
    console.print(
        Panel(
            f"Level:    {level:.1f} {u} (as of {result.last_date})\n"
            f"Trend:    {daily_trend * 7:+.2f} {u}/week\n"
            f"In {days} days: {projected:.1f} {u}",
            title="Holt forecast",
        )
    )


@app.command()
def predict(
    snapshot_path: Path = typer.Argument(..., help="YAML snapshot with samples"),
    goal: Optional[float] = typer.Option(None, "--goal", "-g", help="Goal weight"),
    unit: Optional[str] = typer.Option(None, "--unit", "-u", help="Unit of the goal: lb or kg"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Predict when the goal weight will be reached."""
    settings = get_settings()
    goal_unit = resolve_unit(unit, settings, "predict", json_output)
    goal = goal if goal is not None else settings.preferences.goal_weight
    if goal is None:
        fail("Goal weight is required (--goal or config)", "predict", json_output)
    snapshot = load_or_exit(snapshot_path, "predict", json_output)

    prediction = predict_goal_date(snapshot.samples, goal, goal_unit)  # type: ignore[arg-type]
    if prediction is None:
        fail("Could not fit a trend line to this history", "predict", json_output)

    if json_output:
        output_json({
            "success": True,
            "command": "predict",
            "data": {
                "status": prediction.status.state.value,
                "predicted_date": (
                    prediction.predicted_date.isoformat() if prediction.predicted_date else None
                ),
                "weekly_velocity": round(prediction.weekly_velocity, 3),
                "weight_to_goal": round(prediction.weight_to_goal, 2),
                "unit": prediction.unit.value,
            },
            "human_summary": prediction.status.message,
        })
        return

    color = "green" if prediction.status.is_positive else "yellow"
    u = prediction.unit.value
    console.print(f"[{color}]{prediction.status.message}[/{color}]")
    console.print(f"  Pace:      {prediction.weekly_velocity:+.2f} {u}/week")
    console.print(f"  Remaining: {abs(prediction.weight_to_goal):.1f} {u}")


@app.command()
def summary(
    snapshot_path: Path = typer.Argument(..., help="YAML snapshot with samples"),
    weeks: int = typer.Option(MAX_WEEKS, "--weeks", "-w", help="Calendar weeks to look back"),
    week_start: str = typer.Option(
        "sunday", "--week-start", help="First day of the week: sunday or monday"
    ),
    unit: Optional[str] = typer.Option(None, "--unit", "-u", help="Display unit: lb or kg"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Summarize recent weeks: average, change from last week and best day."""
    settings = get_settings()
    display_unit = resolve_unit(unit, settings, "summary", json_output)
    first_weekday = WEEK_STARTS.get(week_start.strip().lower())
    if first_weekday is None:
        fail(f"--week-start must be sunday or monday, got '{week_start}'", "summary", json_output)
    snapshot = load_or_exit(snapshot_path, "summary", json_output)

    try:
        summaries = weekly_summaries(snapshot.samples, display_unit, first_weekday, weeks)
    except ValueError as e:
        fail(str(e), "summary", json_output)

    def rounded(value: Optional[float], digits: int = 2) -> Optional[float]:
        return round(value, digits) if value is not None else None

    if json_output:
        output_json({
            "success": True,
            "command": "summary",
            "data": {
                "unit": display_unit.value,
                "weeks": [
                    {
                        "week_start": s.week_start.isoformat(),
                        "week_end": s.week_end.isoformat(),
                        "entry_count": s.entry_count,
                        "average_weight": rounded(s.average_weight),
                        "previous_week_average": rounded(s.previous_week_average),
                        "change_from_last_week": rounded(s.change_from_last_week),
                        "best_day": (
                            {"date": s.best_day[0].isoformat(), "weight": round(s.best_day[1], 2)}
                            if s.best_day
                            else None
                        ),
                        "trend": s.trend.value,
                    }
                    for s in summaries
                ],
            },
        })
        return

    if not summaries:
        console.print("[yellow]No weigh-ins in snapshot[/yellow]")
        return

    u = display_unit.value
    table = Table(title="Weekly summary")
    table.add_column("Week")
    table.add_column("Entries", justify="right")
    table.add_column(f"Average ({u})", justify="right")
    table.add_column("Change", justify="right")
    table.add_column("Best day")

    styles = {WeeklyTrend.DOWN: "green", WeeklyTrend.UP: "yellow", WeeklyTrend.STABLE: "blue"}
    for s in summaries:
        change = s.change_from_last_week
        style = styles[s.trend]
        best_when, best_weight = s.best_day
        table.add_row(
            f"{s.week_start:%b} {s.week_start.day} - {s.week_end:%b} {s.week_end.day}",
            str(s.entry_count),
            f"{s.average_weight:.1f}",
            f"[{style}]{change:+.1f}[/{style}]" if change is not None else "--",
            f"{best_when:%a} {best_weight:.1f}",
        )

    console.print(table)


# ============================================================================
# Milestone commands
# ============================================================================


@app.command()
def milestones(
    snapshot_path: Path = typer.Argument(..., help="YAML snapshot with samples and milestones"),
    start: Optional[float] = typer.Option(None, "--start", "-s", help="Start weight"),
    goal: Optional[float] = typer.Option(None, "--goal", "-g", help="Goal weight"),
    current: Optional[float] = typer.Option(
        None, "--current", help="Current weight (default: latest weigh-in)"
    ),
    interval: Optional[str] = typer.Option(None, "--interval", "-i", help="5, 10 or 15"),
    unit: Optional[str] = typer.Option(None, "--unit", "-u", help="Unit: lb or kg"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """List milestones and progress toward the next one."""
    settings = get_settings()
    weight_unit = resolve_unit(unit, settings, "milestones", json_output)
    preference = resolve_interval(interval, settings, "milestones", json_output)
    start_weight, goal_weight = resolve_goal_range(start, goal, settings, "milestones", json_output)
    snapshot = load_or_exit(snapshot_path, "milestones", json_output)

    current = current if current is not None else latest_weight(snapshot, weight_unit)
    if current is None:
        fail("No weigh-ins in snapshot and no --current given", "milestones", json_output)

    targets = generate_milestones(start_weight, goal_weight, weight_unit, preference)
    completed = completed_weights(snapshot.completed_milestones, weight_unit)
    crossed = set(
        detect_crossed_milestones(
            current, start_weight, goal_weight, weight_unit, completed, preference  # type: ignore[arg-type]
        )
    )
    progress = calculate_progress(
        current,  # type: ignore[arg-type]
        start_weight,
        goal_weight,
        weight_unit,
        snapshot.completed_milestones,
        preference,
    )

    def status_of(weight: float) -> str:
        if weight in completed:
            return "completed"
        if weight in crossed:
            return "crossed"
        return "upcoming"

    if json_output:
        output_json({
            "success": True,
            "command": "milestones",
            "data": {
                "unit": weight_unit.value,
                "interval": preference.display_label(weight_unit),
                "milestones": [{"weight": m, "status": status_of(m)} for m in targets],
                "next_milestone": progress.next_milestone,
                "previous_milestone": progress.previous_milestone,
                "progress_to_next": round(progress.progress_to_next_milestone, 4),
                "weight_to_next": round(progress.weight_to_next_milestone, 2),
                "has_reached_goal": progress.has_reached_goal,
            },
        })
        return

    u = weight_unit.value
    table = Table(title=f"Milestones every {preference.display_label(weight_unit)}")
    table.add_column("Target", justify="right")
    table.add_column("Status")
    styles = {"completed": "green", "crossed": "cyan", "upcoming": "dim"}
    for m in targets:
        status = status_of(m)
        table.add_row(f"{m:g} {u}", f"[{styles[status]}]{status}[/{styles[status]}]")
    console.print(table)

    if progress.has_reached_goal:
        console.print("[bold green]Goal reached![/bold green]")
    else:
        console.print(
            f"Next: {progress.next_milestone:g} {u} "
            f"({progress.weight_to_next_milestone:.1f} {u} to go, "
            f"{progress.progress_to_next_milestone:.0%} of the way from "
            f"{progress.previous_milestone:g})"
        )


@app.command()
def celebrate(
    snapshot_path: Path = typer.Argument(..., help="YAML snapshot with samples and milestones"),
    start: Optional[float] = typer.Option(None, "--start", "-s", help="Start weight"),
    goal: Optional[float] = typer.Option(None, "--goal", "-g", help="Goal weight"),
    interval: Optional[str] = typer.Option(None, "--interval", "-i", help="5, 10 or 15"),
    unit: Optional[str] = typer.Option(None, "--unit", "-u", help="Unit: lb or kg"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Decide which milestone celebration to show next, if any."""
    settings = get_settings()
    weight_unit = resolve_unit(unit, settings, "celebrate", json_output)
    preference = resolve_interval(interval, settings, "celebrate", json_output)
    start_weight, goal_weight = resolve_goal_range(start, goal, settings, "celebrate", json_output)
    snapshot = load_or_exit(snapshot_path, "celebrate", json_output)

    current = latest_weight(snapshot, weight_unit)
    check = check_for_celebration(
        has_entries=current is not None,
        current_weight=current if current is not None else 0.0,
        start_weight=start_weight,
        goal_weight=goal_weight,
        unit=weight_unit,
        completed_milestones=snapshot.completed_milestones,
        interval_preference=preference,
    )

    if json_output:
        output_json({
            "success": True,
            "command": "celebrate",
            "data": {
                "milestone_to_show": check.milestone_to_show,
                "reason": check.reason.kind.value,
                "unit": weight_unit.value,
            },
        })
        return

    if check.milestone_to_show is None:
        messages = {
            CelebrationKind.NO_ENTRIES: "No weigh-ins yet.",
            CelebrationKind.NO_CROSSED_MILESTONES: "No milestone reached yet. Keep going!",
            CelebrationKind.ALL_MILESTONES_ALREADY_CELEBRATED: "All reached milestones already celebrated.",
        }
        console.print(f"[dim]{messages[check.reason.kind]}[/dim]")
        return

    label = "Goal reached" if check.milestone_to_show == goal_weight else "Milestone reached"
    console.print(
        Panel(
            f"[bold]{check.milestone_to_show:g} {weight_unit.value}[/bold]",
            title=f"{label}!",
            border_style="green",
        )
    )


if __name__ == "__main__":
    app()
