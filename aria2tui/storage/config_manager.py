"""
Manages loading and saving of the JSON configuration file.
"""

import logging
from pathlib import Path

from aria2tui.exceptions import ConfigurationError
from aria2tui.models.config import Aria2Config

from .json_store import read_json, write_json

log = logging.getLogger(__name__)


class ConfigManager:
    """Handles all operations related to the application's JSON config file."""

    def __init__(self, config_file_path: Path):
        self.config_file_path = config_file_path

    def load_config(self) -> Aria2Config:
        """
        Loads the stored options merged over the defaults.

        A missing or corrupt file yields the defaults; values of the wrong type
        are dropped individually.
        """
        data = read_json(self.config_file_path)
        if data is None:
            log.debug(f"No usable config at '{self.config_file_path}', using defaults.")
            return Aria2Config()
        if not isinstance(data, dict):
            log.debug(
                f"Config at '{self.config_file_path}' is not a JSON object, "
                "using defaults."
            )
            return Aria2Config()
        return Aria2Config.from_partial(data)

    def save_config(self, config: Aria2Config) -> None:
        """
        Writes the options to the config file.

        Raises:
            ConfigurationError: If the file cannot be written.
        """
        try:
            write_json(self.config_file_path, config.to_json_dict())
        except OSError as e:
            log.warning(f"Failed to save configuration file: {e}")
            raise ConfigurationError(
                f"Failed to save configuration file: {e}"
            ) from e
        log.debug(f"Configuration saved to '{self.config_file_path}'.")
