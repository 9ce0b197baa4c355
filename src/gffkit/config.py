"""Configuration management for gffkit.

Settings come from default values or from a TOML file with one table
per component:

    [reader]
    encoding = "utf-8"
    unescape_attributes = false
    on_error = "raise"

    [writer]
    encoding = "utf-8"
    sort_attributes = true
    escape_attributes = false
    line_terminator = "\\n"

Example:
    >>> from gffkit.config import Config
    >>> config = Config.load()
    >>> config.writer.sort_attributes
    True
"""

from __future__ import annotations

import codecs
import tomllib
from pathlib import Path
from typing import Any

import attrs

# =============================================================================
# Default Configuration Values
# =============================================================================

DEFAULT_ENCODING = "utf-8"

# How Reader.records() treats a line that fails to decode
ON_ERROR_RAISE = "raise"
ON_ERROR_SKIP = "skip"
ON_ERROR_WARN = "warn"
ON_ERROR_MODES = (ON_ERROR_RAISE, ON_ERROR_SKIP, ON_ERROR_WARN)
DEFAULT_ON_ERROR = ON_ERROR_RAISE

LINE_TERMINATORS = ("\n", "\r\n")
DEFAULT_LINE_TERMINATOR = "\n"


def _known_encoding(instance: Any, attribute: attrs.Attribute, value: str) -> None:
    try:
        codecs.lookup(value)
    except LookupError as e:
        raise ValueError(f"Unknown {attribute.name}: {value!r}") from e


# =============================================================================
# Configuration Classes
# =============================================================================


@attrs.define
class ReaderConfig:
    """Configuration for reading GFF3.

    Attributes:
        encoding: Text encoding of the input.
        unescape_attributes: Decode GFF3 percent-escapes in attribute values.
        on_error: Default handling of bad lines in Reader.records().
    """

    encoding: str = attrs.field(default=DEFAULT_ENCODING, validator=_known_encoding)
    unescape_attributes: bool = False
    on_error: str = attrs.field(
        default=DEFAULT_ON_ERROR,
        validator=attrs.validators.in_(ON_ERROR_MODES),
    )


@attrs.define
class WriterConfig:
    """Configuration for writing GFF3.

    Attributes:
        encoding: Text encoding of the output.
        sort_attributes: Write attributes sorted by key instead of in
            insertion order.
        escape_attributes: Percent-encode reserved characters in
            attribute values.
        line_terminator: Line ending written after each record.
    """

    encoding: str = attrs.field(default=DEFAULT_ENCODING, validator=_known_encoding)
    sort_attributes: bool = True
    escape_attributes: bool = False
    line_terminator: str = attrs.field(
        default=DEFAULT_LINE_TERMINATOR,
        validator=attrs.validators.in_(LINE_TERMINATORS),
    )


@attrs.define
class Config:
    """Main configuration container for gffkit.

    Attributes:
        reader: Reader configuration.
        writer: Writer configuration.
    """

    reader: ReaderConfig = attrs.Factory(ReaderConfig)
    writer: WriterConfig = attrs.Factory(WriterConfig)

    @classmethod
    def load(cls, path: Path | str | None = None) -> Config:
        """Load configuration from a TOML file.

        Args:
            path: Path to configuration file. If None, returns the
                default configuration.

        Returns:
            Loaded configuration object.

        Raises:
            FileNotFoundError: If configuration file doesn't exist.
            ValueError: If configuration file is invalid.
        """
        if path is None:
            return cls()

        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Configuration file not found: {path}")

        with open(path, "rb") as f:
            try:
                data = tomllib.load(f)
            except tomllib.TOMLDecodeError as e:
                raise ValueError(f"Invalid configuration file {path}: {e}") from e

        return cls.from_dict(data)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Config:
        """Build configuration from a nested dictionary.

        Raises:
            ValueError: On unknown sections, unknown keys or bad values.
        """
        sections = {"reader": ReaderConfig, "writer": WriterConfig}

        unknown = set(data) - set(sections)
        if unknown:
            raise ValueError(f"Unknown configuration section(s): {sorted(unknown)}")

        kwargs = {}
        for name, section_cls in sections.items():
            values = data.get(name, {})
            if not isinstance(values, dict):
                raise ValueError(f"Configuration section [{name}] must be a table")
            try:
                kwargs[name] = section_cls(**values)
            except TypeError as e:
                raise ValueError(f"Invalid [{name}] configuration: {e}") from e

        return cls(**kwargs)

    def to_dict(self) -> dict[str, Any]:
        """Convert configuration to dictionary.

        Returns:
            Dictionary representation of configuration.
        """
        return attrs.asdict(self)

