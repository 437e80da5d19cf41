from __future__ import annotations

import json
import math
import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Mapping, Optional

# Configuration du passage de vérification: valeurs par défaut < fichier JSON < env < CLI.

STRATEGY_HEAD = "head"
STRATEGY_CONTENT = "content"
STRATEGIES = (STRATEGY_HEAD, STRATEGY_CONTENT)

DOWN_LOG_APPEND = "append"
DOWN_LOG_OVERWRITE = "overwrite"
DOWN_LOG_MODES = (DOWN_LOG_APPEND, DOWN_LOG_OVERWRITE)

DEFAULT_TIMEOUTS = {STRATEGY_HEAD: 7.0, STRATEGY_CONTENT: 5.0}
DEFAULT_USER_AGENT = "Mozilla/5.0 (X11; Linux x86_64) canal-check/1.0"

ENV_PREFIX = "CANALCHECK_"
_PATH_FIELDS = ("catalog_path", "down_log_path", "playlist_path")


class SettingsError(ValueError):
    """Valeur de configuration invalide ou fichier de configuration illisible."""


@dataclass(frozen=True)
class Settings:
    catalog_path: Path = Path("canales.json")
    down_log_path: Path = Path("canales_caidos.log")
    playlist_path: Path = Path("canales_activos.m3u")
    strategy: str = STRATEGY_CONTENT
    timeout_s: Optional[float] = None  # None -> valeur par défaut de la stratégie
    max_bytes: int = 10 * 1024
    min_body_length: int = 30
    max_workers: Optional[int] = None  # None -> un worker par chaîne
    down_log_mode: str = DOWN_LOG_APPEND
    user_agent: str = DEFAULT_USER_AGENT

    @property
    def effective_timeout(self) -> float:
        if self.timeout_s is not None:
            return self.timeout_s
        return DEFAULT_TIMEOUTS[self.strategy]

    def validate(self) -> "Settings":
        if self.strategy not in STRATEGIES:
            raise SettingsError(f"unknown strategy {self.strategy!r} (expected one of {', '.join(STRATEGIES)})")
        if self.down_log_mode not in DOWN_LOG_MODES:
            raise SettingsError(
                f"unknown down log mode {self.down_log_mode!r} (expected one of {', '.join(DOWN_LOG_MODES)})"
            )
        if self.timeout_s is not None and (not math.isfinite(self.timeout_s) or self.timeout_s <= 0):
            raise SettingsError("timeout must be a finite number > 0")
        if self.max_bytes < 1:
            raise SettingsError("max_bytes must be >= 1")
        if self.min_body_length < 0:
            raise SettingsError("min_body_length must be >= 0")
        if self.max_workers is not None and self.max_workers < 1:
            raise SettingsError("max_workers must be >= 1")
        return self

    def merged(self, overrides: Mapping[str, object]) -> "Settings":
        """Copie avec les clés non-None de `overrides` appliquées (valeurs converties)."""
        known = {f.name for f in fields(self)}
        changes = {}
        for key, value in overrides.items():
            if value is None:
                continue
            if key not in known:
                raise SettingsError(f"unknown setting: {key}")
            changes[key] = _coerce(key, value)
        return replace(self, **changes)


def _coerce(key: str, value):
    try:
        if key in _PATH_FIELDS:
            return Path(value)
        if key == "timeout_s":
            return float(value)
        if key in ("max_bytes", "min_body_length", "max_workers"):
            if isinstance(value, bool):
                raise ValueError(value)
            return int(value)
        return str(value)
    except (TypeError, ValueError) as exc:
        raise SettingsError(f"invalid value for {key}: {value!r}") from exc


def load_config_file(path: Path) -> dict:
    """
    Lit un fichier JSON de configuration (objet à plat, clés = champs de Settings).
    Les chemins relatifs sont résolus depuis le dossier du fichier.
    """
    try:
        data = json.loads(Path(path).read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError) as exc:
        raise SettingsError(f"cannot read config file {path}: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise SettingsError(f"invalid JSON in config file {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise SettingsError(f"config file {path} must contain a JSON object")

    base = Path(path).parent
    for key in _PATH_FIELDS:
        value = data.get(key)
        if isinstance(value, str) and value and not Path(value).is_absolute():
            data[key] = str(base / value)
    return data


def env_overrides(environ: Mapping[str, str] | None = None) -> dict:
    """Valeurs lues depuis les variables CANALCHECK_*; les variables vides sont ignorées."""
    environ = os.environ if environ is None else environ
    names = {
        "catalog_path": "CATALOG",
        "down_log_path": "DOWN_LOG",
        "playlist_path": "PLAYLIST",
        "strategy": "STRATEGY",
        "timeout_s": "TIMEOUT",
        "max_bytes": "MAX_BYTES",
        "min_body_length": "MIN_BODY_LENGTH",
        "max_workers": "MAX_WORKERS",
        "down_log_mode": "DOWN_LOG_MODE",
        "user_agent": "USER_AGENT",
    }
    out = {}
    for key, suffix in names.items():
        v = (environ.get(ENV_PREFIX + suffix) or "").strip()
        if v:
            out[key] = v
    return out


def load_settings(
    config_file: Path | None = None,
    cli_overrides: Mapping[str, object] | None = None,
    environ: Mapping[str, str] | None = None,
) -> Settings:
    settings = Settings()
    if config_file is not None:
        settings = settings.merged(load_config_file(config_file))
    settings = settings.merged(env_overrides(environ))
    if cli_overrides:
        settings = settings.merged(cli_overrides)
    return settings.validate()
