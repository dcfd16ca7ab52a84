"""Configuration helpers for Sonar Viewer settings persistence."""
from __future__ import annotations

from configparser import ConfigParser, Error
from dataclasses import dataclass
import logging
import os
from pathlib import Path
import sys
from typing import Optional

from sonar_core.model import ChannelKind
from sonar_viewer.model.display_options import DEFAULT_PALETTE, DisplayOptions
from sonar_viewer.model.tiles import DEFAULT_TILE_WIDTH

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "sonar_viewer.ini"
_PATHS_SECTION = "paths"
_DISPLAY_SECTION = "display"
_VIEWPORT_SECTION = "viewport"


@dataclass
class ViewerSettings:
    last_log: Optional[Path] = None
    overlay: bool = False
    color: str = DEFAULT_PALETTE
    depth_range: float = 0.0
    channel: ChannelKind = ChannelKind.TRADITIONAL
    tile_width: int = DEFAULT_TILE_WIDTH

    def display_options(self) -> DisplayOptions:
        return DisplayOptions(
            overlay=self.overlay,
            color=self.color,
            sidescan=self.channel is ChannelKind.SIDESCAN,
            depth_range=self.depth_range,
        )


def _config_dir(main_script_path: Optional[Path]) -> Path:
    if getattr(sys, "frozen", False):
        return Path(sys.executable).parent
    if main_script_path is not None:
        return main_script_path.resolve().parent
    main_module = sys.modules.get("__main__")
    if main_module and getattr(main_module, "__file__", None):
        return Path(main_module.__file__).resolve().parent
    return Path.cwd()


def config_path(main_script_path: Optional[Path]) -> Path:
    return _config_dir(main_script_path) / CONFIG_FILENAME


def _read_parser(ini_path: Path) -> Optional[ConfigParser]:
    parser = ConfigParser()
    try:
        with ini_path.open("r", encoding="utf-8") as handle:
            parser.read_file(handle)
    except (OSError, Error):
        logger.warning("Could not read %s; using defaults", ini_path)
        return None
    return parser


def load_settings(main_script_path: Optional[Path]) -> ViewerSettings:
    settings = ViewerSettings()
    ini_path = config_path(main_script_path)
    if not ini_path.exists():
        return settings
    parser = _read_parser(ini_path)
    if parser is None:
        return settings

    try:
        stored_log = parser.get(_PATHS_SECTION, "last_log", fallback="")
        settings.overlay = parser.getboolean(_DISPLAY_SECTION, "overlay", fallback=False)
        settings.color = parser.get(_DISPLAY_SECTION, "color", fallback=DEFAULT_PALETTE)
        settings.depth_range = max(
            0.0, parser.getfloat(_DISPLAY_SECTION, "range", fallback=0.0)
        )
        channel = parser.get(_DISPLAY_SECTION, "channel", fallback="")
        tile_width = parser.getint(
            _VIEWPORT_SECTION, "tile_width", fallback=DEFAULT_TILE_WIDTH
        )
    except (ValueError, Error):
        logger.warning("Malformed settings in %s; using defaults", ini_path)
        return ViewerSettings()

    if stored_log:
        settings.last_log = Path(stored_log)
    if channel:
        try:
            settings.channel = ChannelKind.from_name(channel)
        except ValueError:
            logger.warning("Ignoring unknown channel %r in %s", channel, ini_path)
    if tile_width > 0:
        settings.tile_width = tile_width
    return settings


def save_settings(settings: ViewerSettings, main_script_path: Optional[Path]) -> None:
    config = ConfigParser()
    ini_path = config_path(main_script_path)
    if ini_path.exists():
        existing = _read_parser(ini_path)
        if existing is None:
            return
        config = existing
    config[_PATHS_SECTION] = {
        "last_log": str(settings.last_log) if settings.last_log else ""
    }
    config[_DISPLAY_SECTION] = {
        "overlay": "true" if settings.overlay else "false",
        "color": settings.color,
        "range": f"{settings.depth_range:g}",
        "channel": settings.channel.value,
    }
    config[_VIEWPORT_SECTION] = {"tile_width": str(settings.tile_width)}
    try:
        with ini_path.open("w", encoding="utf-8") as handle:
            config.write(handle)
            handle.flush()
            os.fsync(handle.fileno())
    except OSError:
        logger.warning("Could not write %s", ini_path)
        return
