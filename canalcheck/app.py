from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from .pipeline import run_check
from .settings import DOWN_LOG_MODES, STRATEGIES, SettingsError, load_settings
from .storage import CatalogError

# Point d'entrée en ligne de commande: configure le logging, charge la configuration et lance un passage.

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_BAD_SETTINGS = 2


def setup_logging(verbose: bool = False) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="canal-check",
        description="Check which channels of a JSON catalog are live and write the catalog, down log and M3U playlist.",
    )
    ap.add_argument("--config", type=Path, default=None, help="JSON settings file.")
    ap.add_argument("--catalog", dest="catalog_path", type=Path, default=None, help="Channel catalog (JSON array).")
    ap.add_argument("--down-log", dest="down_log_path", type=Path, default=None, help="Text log of channels found down.")
    ap.add_argument("--playlist", dest="playlist_path", type=Path, default=None, help="M3U playlist of active channels.")
    ap.add_argument("--strategy", choices=STRATEGIES, default=None, help="head: HEAD status only; content: GET + #EXTM3U check.")
    ap.add_argument("-t", "--timeout", dest="timeout_s", type=float, default=None, help="Per-probe timeout in seconds.")
    ap.add_argument("--max-bytes", type=int, default=None, help="Max response size read by the content strategy.")
    ap.add_argument("--min-body-length", type=int, default=None, help="Minimum playlist body length in characters.")
    ap.add_argument(
        "-c", "--max-workers", type=int, default=None,
        help="Bound the number of concurrent probes (default: one per channel).",
    )
    ap.add_argument("--down-log-mode", choices=DOWN_LOG_MODES, default=None, help="Append to or overwrite the down log.")
    ap.add_argument("--user-agent", default=None, help="User-Agent header sent with probes.")
    ap.add_argument("--fail-on-inactive", action="store_true", help="Exit with code 1 when any channel is down.")
    ap.add_argument("-v", "--verbose", action="store_true", help="Debug logging (one line per probe outcome).")
    return ap


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(args.verbose)

    overrides = {
        key: getattr(args, key)
        for key in (
            "catalog_path", "down_log_path", "playlist_path", "strategy", "timeout_s",
            "max_bytes", "min_body_length", "max_workers", "down_log_mode", "user_agent",
        )
    }
    try:
        settings = load_settings(config_file=args.config, cli_overrides=overrides)
    except SettingsError as e:
        logger.error("Invalid configuration: %s", e)
        return EXIT_BAD_SETTINGS

    try:
        summary = run_check(settings)
    except CatalogError as e:
        logger.error("Cannot load catalog, nothing written: %s", e)
        return EXIT_FAILED

    if summary.sink_failures:
        return EXIT_FAILED
    if args.fail_on_inactive and summary.inactive:
        return EXIT_FAILED
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
