"""
CLI entry point: amw ingest | run | status | health.

Every command loads config from --config (default config.yaml) and
prints human-readable output; runs also emit structured JSON events.
"""

import logging
import sys
from datetime import datetime, timezone

import click
from dotenv import load_dotenv

from config import load_config

load_dotenv()

logger = logging.getLogger("amw")


def _setup_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(name)s %(levelname)s  %(message)s",
        stream=sys.stderr,
    )


def _load_app_config(ctx: click.Context):
    try:
        cfg = load_config(ctx.obj["config_path"])
    except (FileNotFoundError, ValueError) as exc:
        raise click.ClickException(str(exc)) from exc
    logging.getLogger().setLevel(cfg.logging.level)
    return cfg


def _build_engine(cfg):
    """Engine from the indicator JSON config (per-symbol overrides applied)."""
    from amw_core.trend import AMWTrendEngine, IndicatorConfigError
    from config.amw_config import AMWConfigError, load_amw_config

    try:
        amw_cfg = load_amw_config(cfg.data.indicator_config or None, symbol=cfg.symbol)
        return AMWTrendEngine.from_config(amw_cfg)
    except (AMWConfigError, IndicatorConfigError) as exc:
        raise click.ClickException(str(exc)) from exc


def _parse_date(value: str | None) -> datetime | None:
    if not value:
        return None
    try:
        ts = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError as exc:
        raise click.BadParameter(f"not an ISO date: {value!r}") from exc
    if ts.tzinfo is None:
        return ts.replace(tzinfo=timezone.utc)
    return ts.astimezone(timezone.utc)


@click.group()
@click.option("--config", "config_path", default="config.yaml", help="Path to config file.")
@click.pass_context
def cli(ctx: click.Context, config_path: str) -> None:
    """amw-trend: adaptive ATR / volatility trailing-stop trend indicator."""
    _setup_logging()
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path


# ---------- amw ingest ----------


@cli.command()
@click.argument("csv_path", type=click.Path(dir_okay=False))
@click.option("--symbol", "symbol_override", default=None, help="Override symbol. Defaults to config value.")
@click.option("--timeframe", "tf_override", default=None, help="Override timeframe (e.g. 1d, 15m). Defaults to config value.")
@click.pass_context
def ingest(ctx: click.Context, csv_path: str, symbol_override: str | None, tf_override: str | None) -> None:
    """Load bars from a CSV file into the local bar store."""
    cfg = _load_app_config(ctx)
    from data.bar_store import BarStore
    from data.csv_loader import BarDataError, load_bars_csv

    symbol = symbol_override or cfg.symbol
    tf = tf_override or cfg.timeframe
    try:
        bars = load_bars_csv(csv_path, symbol=symbol)
    except (FileNotFoundError, BarDataError) as exc:
        raise click.ClickException(str(exc)) from exc

    if not bars:
        click.echo("No bars found in file.")
        return

    store = BarStore(cfg.data.bar_store_path)
    store.write_bars(symbol, tf, bars)
    click.echo(f"Stored {len(bars)} bars in {cfg.data.bar_store_path}")
    click.echo(f"  Range: {bars[0].time.isoformat()} -> {bars[-1].time.isoformat()}")
    click.echo(f"  Total {tf} bars in store: {store.count_bars(symbol, tf)}")


# ---------- amw run ----------


@cli.command()
@click.option("--csv", "csv_path", default=None, type=click.Path(dir_okay=False), help="Read bars from a CSV file instead of the store.")
@click.option("--start", "start_str", default=None, help="Start date filter (ISO).")
@click.option("--end", "end_str", default=None, help="End date filter (ISO).")
@click.option("--tail", default=None, type=int, help="Only print the last N bars (all bars are still computed).")
@click.pass_context
def run(ctx: click.Context, csv_path: str | None, start_str: str | None, end_str: str | None, tail: int | None) -> None:
    """Compute the trend level for every bar and print the table with flips."""
    cfg = _load_app_config(ctx)
    from amw_core.series import compute_trend
    from cli.output import format_run_summary, format_trend_table
    from cli.structured_log import StructuredEventLogger
    from data.bar_store import BarStore
    from data.csv_loader import BarDataError, load_bars_csv

    events = StructuredEventLogger(
        cfg.symbol,
        enabled=cfg.logging.structured_logs,
        webhook_url=cfg.logging.webhook_url,
    )

    if csv_path:
        try:
            bars = load_bars_csv(csv_path, symbol=cfg.symbol)
        except (FileNotFoundError, BarDataError) as exc:
            events.error(message="bar load failed", detail=str(exc))
            raise click.ClickException(str(exc)) from exc
        since, until = _parse_date(start_str), _parse_date(end_str)
        bars = [
            b for b in bars
            if (since is None or b.time >= since) and (until is None or b.time <= until)
        ]
    else:
        store = BarStore(cfg.data.bar_store_path)
        bars = store.get_bars(
            cfg.symbol, cfg.timeframe, since=_parse_date(start_str), until=_parse_date(end_str)
        )

    if not bars:
        click.echo("No bars to process. Run 'amw ingest' first or pass --csv.")
        return

    engine = _build_engine(cfg)
    events.run_start(indicator=engine.name, bars=len(bars), warm_up_period=engine.warm_up_period)

    points = compute_trend(bars, engine=engine)
    for p in points:
        if p.flipped:
            events.direction_flip(
                bar_time=p.time.isoformat(), direction=p.direction, close=str(p.close), level=str(p.value)
            )

    shown = points[-tail:] if tail else points
    click.echo(format_trend_table(shown, warm_up_period=engine.warm_up_period))
    click.echo(format_run_summary(engine, points, cfg.symbol, cfg.timeframe))

    last = points[-1]
    events.run_complete(
        bars=len(points),
        flips=sum(1 for p in points if p.flipped),
        level=str(last.value),
        direction=last.direction,
    )


# ---------- amw status ----------


@cli.command()
@click.pass_context
def status(ctx: click.Context) -> None:
    """Show the latest trend level, direction and readiness for the stored bars."""
    cfg = _load_app_config(ctx)
    from cli.output import format_status
    from data.bar_store import BarStore

    store = BarStore(cfg.data.bar_store_path)
    bars = store.get_bars(cfg.symbol, cfg.timeframe)
    engine = _build_engine(cfg)
    for bar in bars:
        engine.update(bar)
    click.echo(format_status(engine, cfg.symbol, cfg.timeframe))
    if not bars:
        click.echo("\nNo bars in store. Run 'amw ingest' first.")


# ---------- amw health ----------


@cli.command()
@click.pass_context
def health(ctx: click.Context) -> None:
    """Check config, indicator config and bar data.

    Exit code 0 = healthy, 1 = unhealthy.
    """
    checks: list[tuple[str, bool, str]] = []

    try:
        cfg = load_config(ctx.obj["config_path"])
        checks.append(("config", True, f"loaded ({cfg.symbol} {cfg.timeframe})"))
    except Exception as e:
        checks.append(("config", False, str(e)))
        _print_health(checks)
        raise SystemExit(1)

    try:
        engine = _build_engine(cfg)
        checks.append(("amw_config", True, f"validated ({engine.name})"))
    except click.ClickException as e:
        checks.append(("amw_config", False, e.message))
        engine = None

    try:
        from data.bar_store import BarStore
        store = BarStore(cfg.data.bar_store_path)
        bar_count = store.count_bars(cfg.symbol, cfg.timeframe)
        if bar_count == 0:
            checks.append(("bars", False, f"no {cfg.timeframe} bars for {cfg.symbol}"))
        elif engine is not None and bar_count < engine.warm_up_period:
            checks.append(("bars", False, f"{bar_count} bars, fewer than warm-up period {engine.warm_up_period}"))
        else:
            checks.append(("bars", True, f"{bar_count} {cfg.timeframe} bars"))
    except Exception as e:
        checks.append(("bars", False, str(e)))

    _print_health(checks)
    healthy = all(ok for _, ok, _ in checks)
    raise SystemExit(0 if healthy else 1)


def _print_health(checks: list[tuple[str, bool, str]]) -> None:
    for name, ok, detail in checks:
        status = "OK" if ok else "FAIL"
        click.echo(f"  [{status}] {name}: {detail}")
    healthy = all(ok for _, ok, _ in checks)
    click.echo(f"\nHealth: {'HEALTHY' if healthy else 'UNHEALTHY'}")


if __name__ == "__main__":
    cli()
