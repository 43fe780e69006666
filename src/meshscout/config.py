import logging
import math
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Mapping, Optional

from .errors import InputValidationError

DEFAULT_MIN_HEIGHT_M = 9.0
DEFAULT_OVERPASS_URL = "https://overpass-api.de/api/interpreter"
DEFAULT_GEOCODER_URL = "https://api.zippopotam.us/us"
DEFAULT_TIMEOUT_S = 45.0

CSV_PREFIX = "meshtastic_candidates"
GEOJSON_PREFIX = "meshtastic_sites"

REQUEST_HEADERS = {
    "User-Agent": "MeshScout/1.0 (+https://github.com/USERNAME/REPOSITORY)",
}

_ENV_PATH = Path(__file__).resolve().parents[2] / ".env"

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Settings:
    min_height_m: float = DEFAULT_MIN_HEIGHT_M
    overpass_url: str = DEFAULT_OVERPASS_URL
    geocoder_url: str = DEFAULT_GEOCODER_URL
    timeout_s: float = DEFAULT_TIMEOUT_S


def parse_env_text(text: str) -> Dict[str, str]:
    """Parse dotenv-style ``KEY=value`` lines.

    An optional leading ``export`` is accepted. A value wrapped in matching
    quotes keeps its inner text verbatim. An unquoted value ends at the first
    ``" #"``. Lines without ``=`` and comment lines are ignored.
    """
    values: Dict[str, str] = {}
    for line in text.splitlines():
        key, sep, value = line.strip().partition("=")
        if not sep or key.startswith("#"):
            continue
        if key.startswith("export "):
            key = key[len("export "):]
        key = key.strip()
        if not key or " " in key:
            continue

        value = value.strip()
        if len(value) >= 2 and value[0] == value[-1] and value[0] in "\"'":
            value = value[1:-1]
        else:
            value = value.split(" #", 1)[0].rstrip()
        values[key] = value
    return values


def load_env_file(path: Path = _ENV_PATH) -> None:
    """Copy variables from a ``.env`` file into the environment; existing variables win."""
    if not path.exists():
        return

    try:
        content = path.read_text(encoding="utf-8")
    except OSError as exc:  # pragma: no cover - unexpected IO errors
        logger.warning("Failed to read %s: %s", path, exc)
        return

    for key, value in parse_env_text(content).items():
        os.environ.setdefault(key, value)


def _positive_float(env: Mapping[str, str], name: str, default: float) -> float:
    raw = env.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = float(raw)
    except ValueError as exc:
        raise InputValidationError(f"{name} must be a number, got {raw!r}.") from exc
    if not math.isfinite(value) or value <= 0:
        raise InputValidationError(f"{name} must be a positive number, got {raw!r}.")
    return value


def load_settings(env: Optional[Mapping[str, str]] = None) -> Settings:
    """Build :class:`Settings` from ``MESHSCOUT_*`` environment variables."""
    if env is None:
        load_env_file()
        env = os.environ

    return Settings(
        min_height_m=_positive_float(env, "MESHSCOUT_MIN_HEIGHT_M", DEFAULT_MIN_HEIGHT_M),
        overpass_url=(env.get("MESHSCOUT_OVERPASS_URL") or DEFAULT_OVERPASS_URL).strip(),
        geocoder_url=(env.get("MESHSCOUT_GEOCODER_URL") or DEFAULT_GEOCODER_URL).strip().rstrip("/"),
        timeout_s=_positive_float(env, "MESHSCOUT_TIMEOUT_S", DEFAULT_TIMEOUT_S),
    )
