"""
Manages loading and saving of the optional INI configuration file.
"""

import configparser
import logging
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from msr_cli.exceptions import ConfigurationError
from msr_cli.models.config import DownloadConfig

log = logging.getLogger(__name__)


class ConfigManager:
    """Handles all operations related to the application's INI config file."""

    def __init__(self, config_file_path: Path):
        self.config_file_path = config_file_path
        self._parser = configparser.ConfigParser(interpolation=None)

    def load_config(self, cli_options: dict[str, Any] | None = None) -> DownloadConfig:
        """
        Loads configuration from the INI file if one exists, applies CLI
        overrides, and validates the result.

        Args:
            cli_options: A dictionary of options provided via the command line.

        Returns:
            A validated DownloadConfig object.

        Raises:
            ConfigurationError: If the file cannot be parsed or validation fails.
        """
        config_from_file: dict[str, Any] = {}
        if self.config_file_path.is_file():
            try:
                self._parser.read(self.config_file_path, encoding="utf-8")
            except configparser.Error as e:
                raise ConfigurationError(f"Error parsing configuration file: {e}") from e
            config_from_file = self._get_config_as_dict()
        else:
            log.debug(
                f"No configuration file at '{self.config_file_path}', using defaults."
            )

        if cli_options:
            config_from_file.update(cli_options)

        try:
            config_dir = self.config_file_path.parent
            return DownloadConfig(**config_from_file, config_path=str(config_dir))
        except ValidationError as e:
            raise ConfigurationError(f"Configuration validation failed:\n{e}") from e

    def save_config(self, config: DownloadConfig) -> None:
        """Writes every INI key of the given configuration to the config file."""
        parser = configparser.ConfigParser(interpolation=None)
        parser["DEFAULT"] = {}
        for key in sorted(DownloadConfig.get_ini_keys()):
            value = getattr(config, key)
            if isinstance(value, bool):
                parser["DEFAULT"][key] = "true" if value else "false"
            else:
                parser["DEFAULT"][key] = str(value)

        try:
            self.config_file_path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.config_file_path, "w", encoding="utf-8") as configfile:
                parser.write(configfile)
        except OSError as e:
            raise ConfigurationError(f"Failed to save configuration file: {e}") from e

    def _get_config_as_dict(self) -> dict[str, Any]:
        """
        Reads the 'DEFAULT' section of the INI file into a dictionary, keeping
        only the keys that are present so model defaults apply to the rest.
        """
        section = self._parser["DEFAULT"]
        readers = {
            "base_url": section.get,
            "output_dir": section.get,
            "request_timeout": section.getfloat,
            "max_workers": section.getint,
            "tag_files": section.getboolean,
            "embed_cover": section.getboolean,
        }
        unknown = set(section) - set(readers)
        if unknown:
            log.warning(
                f"[yellow]Ignoring unknown configuration keys: "
                f"{', '.join(sorted(unknown))}[/yellow]"
            )

        try:
            return {key: read(key) for key, read in readers.items() if key in section}
        except ValueError as e:
            raise ConfigurationError(f"Invalid value in configuration file: {e}") from e
