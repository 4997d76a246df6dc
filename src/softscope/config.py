"""
Configuration for softscope.
"""

import os
from collections.abc import Mapping
from dataclasses import dataclass
from typing import TextIO

from softscope.core.context import LIST_READ_OPERATIONS, QUERY_OPERATIONS, Operation
from softscope.core.types import SOFT_DELETE_FIELD
from softscope.logging.config import LogFormat, LogLevel, configure_logging

ENV_PREFIX = "SOFTSCOPE_"


@dataclass(frozen=True)
class ScopeConfig:
    """
    Soft-delete scoping configuration.

    Attributes:
        soft_delete_field: Name of the nullable deletion-timestamp field
        scoped_operations: Operations the scoping hook intercepts
        log_level: Level used by apply_logging
        log_format: Format used by apply_logging

    extend_with_soft_delete only reads the scoping settings; logging is
    set up by the application through ``apply_logging``.
    """

    soft_delete_field: str = SOFT_DELETE_FIELD
    scoped_operations: frozenset[Operation] = LIST_READ_OPERATIONS
    log_level: LogLevel = LogLevel.INFO
    log_format: LogFormat = LogFormat.JSON

    def __post_init__(self) -> None:
        if not self.soft_delete_field or not self.soft_delete_field.strip():
            raise ValueError("soft_delete_field cannot be empty")
        if not self.scoped_operations:
            raise ValueError("scoped_operations cannot be empty")
        invalid = set(self.scoped_operations) - QUERY_OPERATIONS
        if invalid:
            names = ", ".join(sorted(op.value for op in invalid))
            raise ValueError(f"Only read operations can be scoped, got: {names}")

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "ScopeConfig":
        """
        Build a config from ``SOFTSCOPE_*`` environment variables.

        Recognized variables: SOFTSCOPE_SOFT_DELETE_FIELD, SOFTSCOPE_LOG_LEVEL,
        SOFTSCOPE_LOG_FORMAT. Unset variables keep their defaults.
        """
        env = os.environ if environ is None else environ
        defaults = cls()
        return cls(
            soft_delete_field=env.get(f"{ENV_PREFIX}SOFT_DELETE_FIELD", defaults.soft_delete_field),
            log_level=LogLevel(env.get(f"{ENV_PREFIX}LOG_LEVEL", defaults.log_level.value).upper()),
            log_format=LogFormat(env.get(f"{ENV_PREFIX}LOG_FORMAT", defaults.log_format.value).lower()),
        )

    def apply_logging(self, output: TextIO | None = None) -> None:
        """Configure softscope logging with this config's level and format."""
        configure_logging(level=self.log_level, format=self.log_format, output=output)
