"""
CONF file reader.

Model definitions are INI-style text:

    [request_definition]
    r = sub, obj, act

Values are read with "section::key" paths. Keys that appear before any
section header belong to the "default" section.
"""

import configparser
import os
from typing import List, Optional

from ..config import (
    CONF_COMMENT_PREFIXES,
    CONF_DEFAULT_SECTION,
    CONF_KEY_SEPARATOR,
    CONF_LINE_CONTINUATION,
    CONF_LIST_SEPARATOR,
)
from ..errors import ConfigError, ConfigFileNotFoundError, ConfigParseError
from ..utils.text import split_and_trim

# configparser merges its DEFAULT section into every other section;
# keep that mechanism out of the way of the real "default" section.
_PARSER_DEFAULTS = "__pmec_parser_defaults__"


class Config:
    """
    Parsed CONF content.
    """

    def __init__(self):
        self._parser = configparser.ConfigParser(
            interpolation=None,
            delimiters=('=',),
            comment_prefixes=CONF_COMMENT_PREFIXES,
            inline_comment_prefixes=None,
            strict=False,
            empty_lines_in_values=False,
            default_section=_PARSER_DEFAULTS,
        )
        # Keys are case sensitive (r, R, p2, ...)
        self._parser.optionxform = str

    @classmethod
    def new_config(cls, path: str) -> 'Config':
        """
        Load a CONF file.

        Args:
            path: File path

        Returns:
            Config object

        Raises:
            ConfigFileNotFoundError: If the file does not exist
            ConfigParseError: If the content is malformed
        """
        if not os.path.isfile(path):
            raise ConfigFileNotFoundError(f"Config file not found: {path}")

        with open(path, 'r', encoding='utf-8') as f:
            text = f.read()

        return cls.new_config_from_text(text)

    @classmethod
    def new_config_from_text(cls, text: str) -> 'Config':
        """
        Parse CONF text.

        Args:
            text: CONF content

        Returns:
            Config object

        Raises:
            ConfigParseError: If the content is malformed
        """
        config = cls()
        config._parse(text)
        return config

    def _parse(self, text: str):
        content = f"[{CONF_DEFAULT_SECTION}]\n" + join_continuations(text)
        try:
            self._parser.read_string(content)
        except configparser.Error as e:
            raise ConfigParseError(f"Invalid config: {e}") from e

    @staticmethod
    def _split_key(key: str):
        if CONF_KEY_SEPARATOR in key:
            section, option = key.split(CONF_KEY_SEPARATOR, 1)
            return section, option
        return CONF_DEFAULT_SECTION, key

    def get(self, key: str) -> Optional[str]:
        """Raw value for a key, or None if absent."""
        section, option = self._split_key(key)
        if not self._parser.has_section(section):
            return None
        return self._parser.get(section, option, fallback=None)

    def get_string(self, key: str) -> str:
        """
        Read a value as a string.

        Args:
            key: "section::key" path, or a bare key of the default section

        Returns:
            The value, or "" if absent
        """
        value = self.get(key)
        return value if value is not None else ""

    def get_strings(self, key: str) -> List[str]:
        """Read a comma-separated value as a list; [] if absent."""
        value = self.get_string(key)
        if value == "":
            return []
        return split_and_trim(value, CONF_LIST_SEPARATOR)

    def get_bool(self, key: str) -> bool:
        """
        Read a boolean value.

        Raises:
            ConfigError: If the value is absent or not a boolean
        """
        value = self._require(key)
        states = self._parser.BOOLEAN_STATES
        if value.lower() not in states:
            raise ConfigError(f"Not a boolean: {key}={value}")
        return states[value.lower()]

    def get_int(self, key: str) -> int:
        """
        Read an integer value.

        Raises:
            ConfigError: If the value is absent or not an integer
        """
        value = self._require(key)
        try:
            return int(value)
        except ValueError as e:
            raise ConfigError(f"Not an integer: {key}={value}") from e

    def get_float(self, key: str) -> float:
        """
        Read a float value.

        Raises:
            ConfigError: If the value is absent or not a float
        """
        value = self._require(key)
        try:
            return float(value)
        except ValueError as e:
            raise ConfigError(f"Not a float: {key}={value}") from e

    def _require(self, key: str) -> str:
        value = self.get(key)
        if value is None:
            raise ConfigError(f"Missing config key: {key}")
        return value

    def set(self, key: str, value: str):
        """
        Set a value.

        Args:
            key: "section::key" path, or a bare key of the default section
            value: Value to store

        Raises:
            ConfigError: If key is empty
        """
        if not key:
            raise ConfigError("Key is required")
        section, option = self._split_key(key)
        if not self._parser.has_section(section):
            self._parser.add_section(section)
        self._parser.set(section, option, value)

    def sections(self) -> List[str]:
        """Section names, including the default section."""
        return self._parser.sections()


def join_continuations(text: str) -> str:
    """Merge lines ending with a backslash into the following line."""
    lines = []
    pending = []
    for line in text.splitlines():
        stripped = line.rstrip()
        if stripped.endswith(CONF_LINE_CONTINUATION):
            pending.append(stripped[:-1].strip())
            continue
        if pending:
            pending.append(stripped.strip())
            lines.append(" ".join(part for part in pending if part))
            pending = []
        else:
            lines.append(line)
    if pending:
        lines.append(" ".join(part for part in pending if part))
    return "\n".join(lines)
