from __future__ import annotations

import os
import shlex
import subprocess
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import tomli_w

from .errors import ConfigurationError

CMD_NAME = "note-page-cli"
CONFIG_FILENAME = "config.toml"
DEFAULT_EDITOR = "vim"


@dataclass
class Config:
    '''Keys stored in config.toml'''

    account_key_file: str = ""

    def require_account_key_file(self) -> Path:
        """Return the service-account key path, refusing an unset value."""

        if not self.account_key_file.strip():
            raise ConfigurationError("please set key file to config file")
        return Path(self.account_key_file).expanduser()

    def to_toml(self) -> dict:
        return {"account_key_file": self.account_key_file}


def default_config_dir(name: str = CMD_NAME) -> Path:
    """Return the per-user config directory, honoring XDG_CONFIG_HOME."""

    base = os.environ.get("XDG_CONFIG_HOME")
    root = Path(base).expanduser() if base else Path.home() / ".config"
    return root / name


class ConfigStore:
    def __init__(self, directory: Optional[Path] = None) -> None:
        self.directory = directory if directory is not None else default_config_dir()
        self.path = self.directory / CONFIG_FILENAME

    def exists(self) -> bool:
        return self.path.is_file()

    def save(self, config: Config) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        with self.path.open("wb") as fh:
            tomli_w.dump(config.to_toml(), fh)

    def load(self) -> Config:
        """Parse config.toml, writing an empty one first when it does not exist."""

        if not self.exists():
            self.save(Config())

        try:
            with self.path.open("rb") as fh:
                raw = tomllib.load(fh)
        except (tomllib.TOMLDecodeError, UnicodeDecodeError) as exc:
            raise ConfigurationError(f"failed to load config {self.path}: {exc}") from exc

        key_file = raw.get("account_key_file", "")
        if not isinstance(key_file, str):
            raise ConfigurationError(
                f"failed to load config {self.path}: account_key_file must be a string"
            )
        return Config(account_key_file=key_file)

    def edit(self, editor: Optional[str] = None) -> None:
        """Open the config file in the user's editor and wait for it to exit."""

        if not self.exists():
            self.save(Config())

        command = editor or os.environ.get("EDITOR") or DEFAULT_EDITOR
        try:
            subprocess.run([*shlex.split(command), str(self.path)], check=True)
        except FileNotFoundError as exc:
            raise ConfigurationError(f"editor not found: {command}") from exc
        except subprocess.CalledProcessError as exc:
            raise ConfigurationError(f"editor exited with status {exc.returncode}") from exc
