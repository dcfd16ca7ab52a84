"""Entry point for the sonar viewer."""
from __future__ import annotations

import argparse
import logging
import os
from pathlib import Path
import sys

from sonar_core.model import ChannelKind
from sonar_viewer.config import ViewerSettings, load_settings

logger = logging.getLogger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Sonar log viewer")
    parser.add_argument(
        "log",
        nargs="?",
        type=Path,
        help="Humminbird .DAT or Lowrance .sl2 log to open on startup.",
    )
    parser.add_argument(
        "--channel",
        choices=[kind.value for kind in ChannelKind],
        help="Sonar channel to display. Defaults to the last used channel.",
    )
    parser.add_argument(
        "--tile-width",
        type=int,
        help="Tile width in pixels (pings). Defaults to the stored value or 400.",
    )
    parser.add_argument(
        "--log-level",
        default=os.getenv("SONAR_VIEWER_LOG_LEVEL", "INFO"),
        help=(
            "Logging level (e.g. DEBUG, INFO). Defaults to SONAR_VIEWER_LOG_LEVEL "
            "environment variable or INFO."
        ),
    )
    parser.add_argument(
        "--log-file",
        default=os.getenv("SONAR_VIEWER_LOG_PATH"),
        help=(
            "Optional log file path. Defaults to sonar_viewer_log.txt next to the "
            "executable."
        ),
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Shortcut for --log-level DEBUG",
    )
    return parser.parse_args(argv)


def configure_logging(log_level_name: str, log_path: str | None) -> str:
    resolved_level_name = log_level_name.upper()
    log_level = getattr(logging, resolved_level_name, logging.INFO)

    if not log_path:
        base_dir = os.path.dirname(sys.argv[0])
        log_path = os.path.join(base_dir, "sonar_viewer_log.txt")

    logging.basicConfig(
        level=log_level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        handlers=[
            logging.FileHandler(log_path, mode="a", encoding="utf-8"),
            logging.StreamHandler(sys.stdout),
        ],
    )

    return log_path


def apply_overrides(settings: ViewerSettings, args: argparse.Namespace) -> ViewerSettings:
    if args.channel:
        settings.channel = ChannelKind.from_name(args.channel)
    if args.tile_width is not None:
        if args.tile_width <= 0:
            logger.warning("Ignoring non-positive tile width %s", args.tile_width)
        else:
            settings.tile_width = args.tile_width
    return settings


def main() -> None:
    args = parse_args()
    log_level_name = "DEBUG" if args.debug else args.log_level
    log_path = configure_logging(log_level_name, args.log_file)
    logger.info(
        "Starting Sonar Viewer (log level %s, log file %s)", log_level_name.upper(), log_path
    )

    from sonar_viewer.widget.app import SonarViewerApp, SonarViewerWindow

    main_script_path = Path(sys.argv[0]) if sys.argv and sys.argv[0] else None
    settings = apply_overrides(load_settings(main_script_path), args)

    app = SonarViewerApp(sys.argv)
    window = SonarViewerWindow(settings, main_script_path)
    app.window = window
    window.show()
    if args.log is not None:
        window.open_log(args.log)

    def cleanup() -> None:
        try:
            if window:
                window.close()
        except Exception:  # pragma: no cover - best effort
            logger.exception("Unexpected error while closing window")

    app.aboutToQuit.connect(cleanup)
    sys.exit(app.exec_())


if __name__ == "__main__":
    main()
