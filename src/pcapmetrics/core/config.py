# src/pcapmetrics/core/config.py
"""
Settings schema and loading for pcapmetrics.

Uses Pydantic for validation and Dynaconf for multi-source loading.
Settings are frozen (immutable) after construction.

Option names follow the established pcap input configuration
(csv_column_names, tshark_path, ...), so existing configurations carry over.
Those configurations write csv_timestamp_format as a reference layout; the
epoch formats ("unix", ...) and strftime formats are additions of this
project and are not understood by older consumers of the same settings.
"""

import tempfile
from pathlib import Path
from typing import Any, Self

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

from pcapmetrics.contracts.errors import PCAPConfigError
from pcapmetrics.contracts.schema import CaptureSchema

DESCRIPTION = "Process PCAP files using `tshark` and turn its CSV output into metrics."

SAMPLE_CONFIG = """\
# Capture files to process on every pass. Each file is moved aside for
# processing and an empty file is left in its place for the producer.
files:
  - /var/log/pcap/capture.pcap

# tshark must print one comma-separated line per packet, with one value
# per entry in csv_column_names. The capture path is appended as `-r <file>`.
tshark_path: /usr/bin/tshark
tshark_args:
  - -T
  - fields
  - -E
  - separator=,
  - -E
  - quote=d
  - -e
  - frame.time_epoch
  - -e
  - ip.src
  - -e
  - ip.dst
  - -e
  - tcp.dstport
  - -e
  - frame.len

# Column layout of tshark's output, in order.
csv_column_names: [time, src, dst, dstport, length]
# int, float, bool or string; anything else is kept as a string.
csv_column_types: [string, string, string, int, int]
# Columns stored as tags instead of fields.
csv_tag_columns: [src, dst]
# Column holding the packet time, and how to parse it: a reference layout
# such as "2006-01-02T15:04:05Z07:00", "unix", "unix_ms", "unix_us",
# "unix_ns", or a strftime format. Leave empty to stamp records with the
# time they were decoded.
csv_timestamp_column: time
csv_timestamp_format: unix
csv_measurement_name: pcap

# Where captures are moved while they are processed (default: system temp dir).
# tmp_dir: /var/lib/pcapmetrics
"""


class PCAPSettings(BaseModel):
    """Validated settings for one capture processor.

    Example YAML:
        files: [/var/log/pcap/capture.pcap]
        tshark_path: /usr/bin/tshark
        tshark_args: [-T, fields, -E, separator=,, -e, ip.src, -e, frame.len]
        csv_column_names: [src, length]
        csv_column_types: [string, int]
        csv_tag_columns: [src]

    tshark_path may be left empty here; a pass refuses to start without it.
    """

    model_config = {"frozen": True, "extra": "forbid"}

    files: list[str] = Field(default_factory=list, description="Capture files to process, in order")

    csv_column_names: list[str] = Field(..., min_length=1, description="Column names of tshark's output, in order")
    csv_column_types: list[str] = Field(..., description="Declared type per column: int, float, bool or string")
    csv_tag_columns: list[str] = Field(default_factory=list, description="Columns stored as tags")
    csv_timestamp_column: str = Field(default="", description="Column holding the event time (empty: decode time)")
    csv_timestamp_format: str = Field(default="", description="Format of csv_timestamp_column")
    csv_measurement_name: str = Field(default="pcap", min_length=1, description="Measurement name of emitted metrics")

    tshark_path: str = Field(default="", description="Path of the tshark executable")
    tshark_args: list[str] = Field(default_factory=list, description="Arguments placed before `-r <capture>`")

    tmp_dir: str = Field(default="", description="Processing directory (empty: system temp dir)")

    @field_validator("csv_column_names")
    @classmethod
    def validate_column_names(cls, v: list[str]) -> list[str]:
        if any(not name.strip() for name in v):
            raise ValueError("column names cannot be empty")
        duplicates = sorted({name for name in v if v.count(name) > 1})
        if duplicates:
            raise ValueError(f"duplicate column names: {', '.join(duplicates)}")
        return v

    @model_validator(mode="after")
    def validate_column_layout(self) -> Self:
        names = self.csv_column_names
        if len(self.csv_column_types) != len(names):
            raise ValueError(
                f"csv_column_types has {len(self.csv_column_types)} entries but csv_column_names has {len(names)}; they must match"
            )

        unknown_tags = [tag for tag in self.csv_tag_columns if tag not in names]
        if unknown_tags:
            raise ValueError(f"csv_tag_columns names unknown columns: {', '.join(unknown_tags)}")

        if self.csv_timestamp_column:
            if self.csv_timestamp_column not in names:
                raise ValueError(f"csv_timestamp_column '{self.csv_timestamp_column}' is not one of csv_column_names")
            if not self.csv_timestamp_format:
                raise ValueError("csv_timestamp_format is required when csv_timestamp_column is set")
        return self

    @classmethod
    def from_dict(cls, config: dict[str, Any]) -> Self:
        """Create settings from a dict with a clear error on validation failure.

        Raises:
            PCAPConfigError: If the configuration is invalid.
        """
        try:
            return cls.model_validate(config)
        except ValidationError as e:
            raise PCAPConfigError(f"Invalid configuration for {cls.__name__}: {e}") from e

    def resolved_tmp_dir(self) -> Path:
        """Processing directory, defaulting to the system temp dir."""
        if self.tmp_dir:
            return Path(self.tmp_dir)
        return Path(tempfile.gettempdir())

    def build_schema(self) -> CaptureSchema:
        return CaptureSchema.build(
            measurement=self.csv_measurement_name,
            columns=self.csv_column_names,
            types=self.csv_column_types,
            tag_columns=self.csv_tag_columns,
            timestamp_column=self.csv_timestamp_column or None,
            timestamp_format=self.csv_timestamp_format,
        )


def load_settings(config_path: Path) -> PCAPSettings:
    """Load settings from a YAML file with environment variable overrides.

    Uses Dynaconf for multi-source loading with precedence:
    1. Environment variables (PCAPMETRICS_*) - highest priority
    2. Config file
    3. Defaults from the Pydantic schema - lowest priority

    Args:
        config_path: Path to YAML configuration file

    Returns:
        Validated PCAPSettings instance

    Raises:
        ValidationError: If configuration fails Pydantic validation
        FileNotFoundError: If config file doesn't exist
    """
    from dynaconf import Dynaconf

    # Dynaconf silently accepts missing files
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    dynaconf_settings = Dynaconf(
        envvar_prefix="PCAPMETRICS",
        settings_files=[str(config_path)],
        environments=False,
        load_dotenv=False,
        merge_enabled=True,
    )

    # Dynaconf returns uppercase keys; convert to lowercase for Pydantic
    # and drop its own bookkeeping keys
    internal_keys = {"LOAD_DOTENV", "ENVIRONMENTS", "SETTINGS_FILES"}
    raw_config = {k.lower(): v for k, v in dynaconf_settings.as_dict().items() if k not in internal_keys}

    return PCAPSettings(**raw_config)


def render_sample_config() -> str:
    """Sample configuration, checked to be loadable before it is returned."""
    PCAPSettings.from_dict(yaml.safe_load(SAMPLE_CONFIG))
    return SAMPLE_CONFIG
