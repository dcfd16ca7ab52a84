from __future__ import annotations

import os
from pathlib import Path

from sonar_core.errors import FormatMismatchError, LogFileNotFoundError
from sonar_core.humminbird import open_humminbird
from sonar_core.lowrance import open_lowrance
from sonar_core.model import ChannelKind, SonarLog

SUPPORTED_EXTENSIONS = (".dat", ".sl2")
FILE_DIALOG_FILTER = "Sonar logs (*.DAT *.dat *.sl2 *.SL2);;All files (*)"


def open_sonar_log(
    path: Path | str, channel: ChannelKind = ChannelKind.TRADITIONAL
) -> SonarLog:
    """Open a Humminbird ``.DAT`` or Lowrance ``.sl2`` recording."""

    path = Path(path)
    if not path.is_file():
        raise LogFileNotFoundError(f"Sonar log not found: {path}")

    extension = os.path.splitext(path.name)[1].lower()
    if extension == ".dat":
        return open_humminbird(path, channel)
    if extension == ".sl2":
        return open_lowrance(path, channel)
    raise FormatMismatchError(
        f"Unsupported sonar log {path.name}; expected one of {', '.join(SUPPORTED_EXTENSIONS)}"
    )
