from pathlib import Path

from sonar_core.model import ChannelKind
from sonar_viewer import config
from sonar_viewer.config import ViewerSettings, load_settings, save_settings
from sonar_viewer.main import apply_overrides, parse_args


def _script(tmp_path: Path) -> Path:
    return tmp_path / "sonar_viewer.py"


def test_missing_file_gives_defaults(tmp_path):
    settings = load_settings(_script(tmp_path))
    assert settings == ViewerSettings()


def test_settings_round_trip(tmp_path):
    script = _script(tmp_path)
    saved = ViewerSettings(
        last_log=tmp_path / "R00012.DAT",
        overlay=True,
        color="amber",
        depth_range=25.5,
        channel=ChannelKind.SIDESCAN,
        tile_width=256,
    )

    save_settings(saved, script)
    loaded = load_settings(script)

    assert loaded == saved
    assert (tmp_path / config.CONFIG_FILENAME).exists()


def test_save_keeps_unrelated_sections(tmp_path):
    ini = tmp_path / config.CONFIG_FILENAME
    ini.write_text("[extra]\nkeep = yes\n", encoding="utf-8")

    save_settings(ViewerSettings(), _script(tmp_path))

    assert "keep = yes" in ini.read_text(encoding="utf-8")


def test_malformed_file_gives_defaults(tmp_path):
    (tmp_path / config.CONFIG_FILENAME).write_text("not an ini file", encoding="utf-8")
    assert load_settings(_script(tmp_path)) == ViewerSettings()


def test_bad_values_give_defaults(tmp_path):
    (tmp_path / config.CONFIG_FILENAME).write_text(
        "[display]\nrange = deep\n", encoding="utf-8"
    )
    assert load_settings(_script(tmp_path)) == ViewerSettings()


def test_unknown_channel_and_bad_tile_width_are_ignored(tmp_path):
    (tmp_path / config.CONFIG_FILENAME).write_text(
        "[display]\nchannel = chirp\ncolor = blue\n[viewport]\ntile_width = 0\n",
        encoding="utf-8",
    )

    settings = load_settings(_script(tmp_path))

    assert settings.channel is ChannelKind.TRADITIONAL
    assert settings.color == "blue"
    assert settings.tile_width == 400


def test_display_options_follow_channel():
    options = ViewerSettings(channel=ChannelKind.SIDESCAN, depth_range=8.0).display_options()
    assert options.sidescan
    assert options.depth_range == 8.0
    assert not ViewerSettings().display_options().sidescan


def test_command_line_overrides_stored_values():
    args = parse_args(["R00001.DAT", "--channel", "downscan", "--tile-width", "200"])

    settings = apply_overrides(ViewerSettings(tile_width=400), args)

    assert args.log == Path("R00001.DAT")
    assert settings.channel is ChannelKind.DOWNSCAN
    assert settings.tile_width == 200


def test_missing_overrides_keep_stored_values():
    settings = apply_overrides(
        ViewerSettings(channel=ChannelKind.SIDESCAN, tile_width=300), parse_args([])
    )
    assert settings.channel is ChannelKind.SIDESCAN
    assert settings.tile_width == 300


def test_frozen_builds_store_config_beside_executable(monkeypatch, tmp_path):
    monkeypatch.setattr(config.sys, "frozen", True, raising=False)
    monkeypatch.setattr(config.sys, "executable", str(tmp_path / "sonar.exe"))
    assert config.config_path(None) == tmp_path / config.CONFIG_FILENAME
