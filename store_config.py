# store_config.py
from __future__ import annotations

import configparser
import os
import platform
from dataclasses import dataclass, fields
from pathlib import Path

from models import CaptureOptions


DEFAULT_CONFIG_TEXT = """\
[Audio]
workaround = false
only_default_speakers = true
ignore_inputs = true
ignore_virtual = true
granular_select = false
host_binary =
"""


def _windows_appdata_dir() -> Path:
    appdata = os.environ.get("APPDATA")
    if appdata:
        return Path(appdata)
    return Path.home() / "AppData" / "Roaming"


def _linux_xdg_config_dir() -> Path:
    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg)
    return Path.home() / ".config"


def user_config_dir(app_name: str) -> Path:
    sysname = (platform.system() or "").lower()
    if sysname.startswith("windows"):
        return _windows_appdata_dir() / app_name
    return _linux_xdg_config_dir() / app_name


@dataclass
class AudioSettings:
    workaround: bool = False
    only_default_speakers: bool = True
    ignore_inputs: bool = True
    ignore_virtual: bool = True
    granular_select: bool = False
    host_binary: str = ""

    def capture_options(self) -> CaptureOptions:
        return CaptureOptions(
            only_default_speakers=self.only_default_speakers,
            ignore_inputs=self.ignore_inputs,
            ignore_virtual=self.ignore_virtual,
            workaround=self.workaround,
        )


@dataclass(frozen=True)
class ConfigStore:
    app_name: str = "screenshare-picker"
    filename: str = "picker.cfg"
    base_dir: Path | None = None

    @property
    def dir_path(self) -> Path:
        if self.base_dir is not None:
            return self.base_dir
        return user_config_dir(self.app_name)

    @property
    def file_path(self) -> Path:
        return self.dir_path / self.filename

    def ensure_exists(self) -> None:
        self.dir_path.mkdir(parents=True, exist_ok=True)
        if not self.file_path.exists():
            self.file_path.write_text(DEFAULT_CONFIG_TEXT, encoding="utf-8")

    def load(self) -> configparser.ConfigParser:
        self.ensure_exists()
        # host_binary is free text; a literal % must survive a save
        cfg = configparser.ConfigParser(interpolation=None)
        cfg.read(self.file_path, encoding="utf-8")
        if not cfg.has_section("Audio"):
            cfg.add_section("Audio")
        return cfg

    def save(self, cfg: configparser.ConfigParser) -> None:
        self.ensure_exists()
        with self.file_path.open("w", encoding="utf-8") as f:
            cfg.write(f)

    def load_audio_settings(self) -> AudioSettings:
        """
        I fall back to the default for every missing or unparsable value.
        """
        cfg = self.load()
        defaults = AudioSettings()
        kw = {}
        for f in fields(AudioSettings):
            fallback = getattr(defaults, f.name)
            if isinstance(fallback, bool):
                try:
                    kw[f.name] = cfg.getboolean("Audio", f.name, fallback=fallback)
                except ValueError:
                    kw[f.name] = fallback
            else:
                kw[f.name] = cfg.get("Audio", f.name, fallback=fallback).strip()
        return AudioSettings(**kw)

    def save_audio_settings(self, settings: AudioSettings) -> None:
        cfg = self.load()
        for f in fields(AudioSettings):
            v = getattr(settings, f.name)
            cfg.set("Audio", f.name, ("true" if v else "false") if isinstance(v, bool) else str(v))
        self.save(cfg)
