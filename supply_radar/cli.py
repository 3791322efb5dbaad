"""
``supply-radar`` command line.

  supply-radar validate-config [--config PATH] [--show-full]
  supply-radar snapshot [--config PATH] [--output FILE]
  supply-radar serve [--host H] [--port P] [--config PATH]

Config problems print ``[ERROR] ...`` on stderr and exit 1 before any
network call is made.
"""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Optional

import typer

app = typer.Typer(
    name="supply-radar",
    help="Aggregate market, news, disaster and KEV feeds into one disruption dashboard.",
    add_completion=False,
)

_CONFIG_OPTION_HELP = "TOML config file (default: config/default.toml)."


# ── Helpers ───────────────────────────────────────────────────────────────────

def _load_config_or_exit(config_path: Optional[str] = None):
    from supply_radar.config import load_config

    try:
        return load_config(Path(config_path) if config_path else None)
    except FileNotFoundError as exc:
        message = str(exc)
    except Exception as exc:
        message = f"Config validation failed: {exc}"
    typer.echo(f"[ERROR] {message}", err=True)
    raise typer.Exit(code=1)


def _configure_logging(config, stream=None) -> None:
    from supply_radar.utils.logging import configure_logging

    configure_logging(config.logging, stream=stream)


def _symbols(specs) -> str:
    return ", ".join(spec.symbol for spec in specs)


# ── Commands ──────────────────────────────────────────────────────────────────

@app.command("validate-config")
def validate_config(
    config_path: Optional[str] = typer.Option(None, "--config", help=_CONFIG_OPTION_HELP),
    show_full: bool = typer.Option(
        False, "--show-full", "--full", help="Also dump every field as JSON.",
    ),
) -> None:
    """Parse the config layers and print the effective ticker universe and endpoints."""
    config = _load_config_or_exit(config_path)
    tickers = config.tickers

    rows = [
        ("HTTP timeout", f"{config.http.timeout_seconds}s"),
        ("Metals", _symbols(tickers.metals)),
        ("US indices", _symbols(tickers.us)),
        ("APAC indices", _symbols(tickers.apac)),
        ("EU indices", _symbols(tickers.eu)),
        ("Stress proxy", tickers.vix.symbol),
        ("News endpoint", config.feeds.news_url),
        ("Server", f"{config.server.host}:{config.server.port}"),
        ("Log level", config.logging.level),
        ("Debug mode", config.debug),
    ]
    for label, value in rows:
        typer.echo(f"  {label + ':':<16} {value}")

    if show_full:
        typer.echo("")
        typer.echo(json.dumps(config.model_dump(), indent=2, default=str))

    typer.echo("")
    typer.echo("[OK] Config valid.")


@app.command("snapshot")
def snapshot(
    config_path: Optional[str] = typer.Option(None, "--config", help=_CONFIG_OPTION_HELP),
    output: Optional[str] = typer.Option(
        None, "--output", "-o", help="Write the payload JSON here instead of stdout.",
    ),
) -> None:
    """Build one dashboard payload and print or save it as JSON.

    Runs the same fan-out as ``GET /api/dashboard``.  Unreachable feeds are
    replaced by simulated data; the summary line shows the resulting mode.
    Without ``--output`` stdout carries only the JSON document; log lines and
    the summary go to stderr.
    """
    from supply_radar.pipeline.assembler import AggregationError, DashboardAssembler

    config = _load_config_or_exit(config_path)
    _configure_logging(config, stream=sys.stderr if output is None else None)

    try:
        payload = DashboardAssembler(config).build_sync()
    except AggregationError as exc:
        typer.echo(f"[ERROR] {exc}", err=True)
        raise typer.Exit(code=1)

    document = json.dumps(payload.to_wire(), indent=2)

    if output:
        out_path = Path(output)
        out_path.parent.mkdir(parents=True, exist_ok=True)
        out_path.write_text(document + "\n", encoding="utf-8")
        typer.echo(f"  Written: {out_path}")
    else:
        typer.echo(document)

    coverage = payload.coverage
    typer.echo(
        f"[OK] Snapshot built | mode={payload.source_mode} | "
        f"markets={coverage.markets.live}/{coverage.markets.total} live | "
        f"news={coverage.disruption_news.live}/{coverage.disruption_news.total} live | "
        f"indicator={payload.predictor.disruption_indicator.final_aggregated_score} "
        f"({payload.predictor.disruption_indicator.band})",
        err=output is None,
    )


@app.command("serve")
def serve(
    host: Optional[str] = typer.Option(None, "--host", help="Bind address. Defaults to server.host from config."),
    port: Optional[int] = typer.Option(None, "--port", help="Bind port. Defaults to server.port from config."),
    config_path: Optional[str] = typer.Option(None, "--config", help=_CONFIG_OPTION_HELP),
) -> None:
    """Serve ``GET /api/dashboard`` and ``GET /health`` with uvicorn."""
    import uvicorn

    from supply_radar.server import create_app

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    bind_host = host or config.server.host
    bind_port = port or config.server.port

    typer.echo(f"Serving on http://{bind_host}:{bind_port}/api/dashboard")
    uvicorn.run(
        create_app(config),
        host=bind_host,
        port=bind_port,
        log_level=config.logging.level.lower(),
    )


# ── Entry point ───────────────────────────────────────────────────────────────

if __name__ == "__main__":
    app()
