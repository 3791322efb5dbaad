"""
Configuration for Supply Radar.

Layers, later ones winning:

  config/default.toml    committed defaults (tickers, endpoints, fallbacks)
  config/local.toml      optional overrides beside the main file
  .env / environment     ``SUPPLY_RADAR_*`` variables

``load_config()`` returns a frozen ``AppConfig``. The assembler, the HTTP app
and the CLI all take that object as an argument, so tests can swap ticker
lists or fallback constants without touching module globals.
"""

from __future__ import annotations

import os
import tomllib
from pathlib import Path
from typing import Any, Callable, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, field_validator

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

# ── Sub-config models ─────────────────────────────────────────────────────────


class TickerSpec(BaseModel):
    """One market instrument tracked on the dashboard.

    ``fallback`` is the base price used when the quote API is unavailable;
    it also seeds the synthetic oscillator phase for that ticker.
    """

    model_config = ConfigDict(frozen=True)

    symbol: str
    name: str
    fallback: float

    @field_validator("fallback")
    @classmethod
    def validate_fallback_positive(cls, v: float) -> float:
        if v <= 0:
            raise ValueError(f"fallback base price must be positive, got {v}.")
        return v


class HttpConfig(BaseModel):
    """Outbound HTTP settings shared by every feed client."""

    model_config = ConfigDict(frozen=True)

    timeout_seconds: float = 8.0
    user_agent: str = "Mozilla/5.0"

    @field_validator("timeout_seconds")
    @classmethod
    def validate_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError(f"timeout_seconds must be positive, got {v}.")
        return v


class TickersConfig(BaseModel):
    """Market groups rendered as cards, plus the VIX stress proxy."""

    model_config = ConfigDict(frozen=True)

    metals: list[TickerSpec] = [
        TickerSpec(symbol="GC=F", name="Gold (XAU/USD)", fallback=2354.1),
        TickerSpec(symbol="SI=F", name="Silver (XAG/USD)", fallback=30.91),
        TickerSpec(symbol="PL=F", name="Platinum (XPT/USD)", fallback=1040.4),
        TickerSpec(symbol="PA=F", name="Palladium (XPD/USD)", fallback=982.5),
    ]
    us: list[TickerSpec] = [
        TickerSpec(symbol="^GSPC", name="S&P 500", fallback=5355.7),
        TickerSpec(symbol="^NDX", name="Nasdaq 100", fallback=19032.8),
        TickerSpec(symbol="^DJI", name="Dow Jones", fallback=39086.1),
        TickerSpec(symbol="^RUT", name="Russell 2000", fallback=2108.4),
    ]
    apac: list[TickerSpec] = [
        TickerSpec(symbol="^N225", name="Nikkei 225 (Japan)", fallback=39281.2),
        TickerSpec(symbol="^HSI", name="Hang Seng (HK)", fallback=18351.9),
        TickerSpec(symbol="^KS11", name="KOSPI (S. Korea)", fallback=2761.2),
        TickerSpec(symbol="^STI", name="Straits Times (SG)", fallback=3345.2),
    ]
    eu: list[TickerSpec] = [
        TickerSpec(symbol="^GDAXI", name="DAX (Germany)", fallback=18698.1),
        TickerSpec(symbol="^FTSE", name="FTSE 100 (UK)", fallback=8288.6),
        TickerSpec(symbol="^FCHI", name="CAC 40 (France)", fallback=7578.2),
        TickerSpec(symbol="^STOXX50E", name="Euro Stoxx 50", fallback=4961.2),
    ]
    vix: TickerSpec = TickerSpec(symbol="^VIX", name="CBOE Volatility Index", fallback=16.4)


class FeedsConfig(BaseModel):
    """Upstream endpoints and query parameters for the non-quote feeds."""

    model_config = ConfigDict(frozen=True)

    quote_url_template: str = (
        "https://query1.finance.yahoo.com/v8/finance/chart/{symbol}?range=5d&interval=1d"
    )
    news_url: str = "https://api.gdeltproject.org/api/v2/doc/doc"
    news_query: str = "(supply chain OR logistics OR shipping)"
    news_max_records: int = 7
    disaster_url: str = "https://api.reliefweb.int/v1/disasters"
    disaster_appname: str = "SChainRealtime"
    disaster_limit: int = 20
    disaster_query: str = "disaster OR cyclone OR flood OR drought OR wildfire"
    disaster_window_days: int = 7
    vulnerability_url: str = (
        "https://www.cisa.gov/sites/default/files/feeds/known_exploited_vulnerabilities.json"
    )
    vulnerability_window_days: int = 30


class FallbackConfig(BaseModel):
    """Constants reported when a registry feed cannot be reached."""

    model_config = ConfigDict(frozen=True)

    disaster_recent: int = 9
    disaster_total: int = 20
    vulnerability_recent: int = 23
    vulnerability_total: int = 1210


class ServerConfig(BaseModel):
    """Bind settings for the ``serve`` command."""

    model_config = ConfigDict(frozen=True)

    host: str = "127.0.0.1"
    port: int = 3000


class LoggingConfig(BaseModel):
    """Root log level, optional log file and line format."""

    model_config = ConfigDict(frozen=True)

    level: str = "INFO"
    log_file: str = ""
    json_format: bool = False

    @field_validator("level")
    @classmethod
    def normalise_level(cls, v: str) -> str:
        name = v.strip().upper()
        if name not in _LOG_LEVELS:
            raise ValueError(f"unknown log level {v!r}; expected one of {', '.join(_LOG_LEVELS)}.")
        return name


class AppConfig(BaseModel):
    """Every setting the assembler, HTTP app and CLI read.

    ``AppConfig()`` with no arguments is a fully usable configuration with
    the default ticker universe and fallback constants.
    """

    model_config = ConfigDict(frozen=True)

    http: HttpConfig = HttpConfig()
    tickers: TickersConfig = TickersConfig()
    feeds: FeedsConfig = FeedsConfig()
    fallbacks: FallbackConfig = FallbackConfig()
    server: ServerConfig = ServerConfig()
    logging: LoggingConfig = LoggingConfig()
    debug: bool = False


# ── Loader ────────────────────────────────────────────────────────────────────

# (variable, section or None for top level, key, parser)
_ENV_OVERRIDES: tuple[tuple[str, Optional[str], str, Callable[[str], Any]], ...] = (
    ("SUPPLY_RADAR_HTTP_TIMEOUT", "http", "timeout_seconds", float),
    ("SUPPLY_RADAR_LOG_LEVEL", "logging", "level", str),
    ("SUPPLY_RADAR_PORT", "server", "port", int),
    ("SUPPLY_RADAR_DEBUG", None, "debug", lambda s: s.lower() in ("1", "true", "yes")),
)

_SECTIONS: dict[str, type[BaseModel]] = {
    "http": HttpConfig,
    "tickers": TickersConfig,
    "feeds": FeedsConfig,
    "fallbacks": FallbackConfig,
    "server": ServerConfig,
    "logging": LoggingConfig,
}


def _repo_root() -> Path:
    """Nearest ancestor of this package holding ``pyproject.toml``, else its parent."""
    here = Path(__file__).resolve().parent
    for candidate in (here, *here.parents[:4]):
        if (candidate / "pyproject.toml").is_file():
            return candidate
    return here.parent


def _read_toml(path: Path) -> dict[str, Any]:
    with path.open("rb") as fh:
        return tomllib.load(fh)


def load_config(config_path: Optional[Path] = None) -> AppConfig:
    """Read, merge and validate the configuration layers.

    ``config_path`` defaults to ``config/default.toml`` under the repo root.
    A ``local.toml`` next to it is merged on top, then ``SUPPLY_RADAR_*``
    variables (``.env`` included) win over both.

    Raises:
        FileNotFoundError: ``config_path`` does not exist.
        pydantic.ValidationError: A merged value is out of range.
    """
    root = _repo_root()
    load_dotenv(dotenv_path=root / ".env", override=False)

    path = Path(config_path) if config_path is not None else root / "config" / "default.toml"
    if not path.exists():
        raise FileNotFoundError(
            f"Config file not found: {path}\n"
            "Pass --config or restore config/default.toml."
        )

    raw = _read_toml(path)
    local = path.with_name("local.toml")
    if local.exists():
        raw = _deep_merge(raw, _read_toml(local))

    return _build_app_config(_apply_env_overrides(raw))


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Return ``base`` with ``override`` layered on; nested tables merge key by key."""
    merged = dict(base)
    for key, value in override.items():
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            merged[key] = _deep_merge(current, value)
        else:
            merged[key] = value
    return merged


def _apply_env_overrides(raw: dict[str, Any]) -> dict[str, Any]:
    for variable, section, key, parse in _ENV_OVERRIDES:
        value = os.environ.get(variable)
        if not value:
            continue
        target = raw if section is None else raw.setdefault(section, {})
        target[key] = parse(value)
    return raw


def _build_app_config(raw: dict[str, Any]) -> AppConfig:
    """Missing sections keep model defaults, so ``[logging]`` alone is a valid file."""
    sections = {name: model(**raw.get(name, {})) for name, model in _SECTIONS.items()}
    debug = raw.get("debug", raw.get("project", {}).get("debug", False))
    return AppConfig(debug=debug, **sections)
