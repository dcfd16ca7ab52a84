"""Sonar log decoders (Humminbird DAT/SON, Lowrance SL2)."""

from sonar_core.errors import SonarDecodeError
from sonar_core.loader import open_sonar_log
from sonar_core.model import ChannelKind, LogHeader, Ping, SonarLog
