"""
=============================================================================
PARSER CONFIGURATION
=============================================================================

Centralized configuration for the HTTP and JSON parsers.

=============================================================================
CONFIGURATION SOURCES
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    CONFIGURATION HIERARCHY                          │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   Priority (highest to lowest):                                     │
    │                                                                      │
    │   1. Keyword arguments to a parse function                          │
    │      └── parse_json(data, allow_trailing_data=True)                 │
    │                                                                      │
    │   2. An explicit ParserConfig                                       │
    │      └── parse_json(data, config=ParserConfig(max_json_depth=32))   │
    │                                                                      │
    │   3. Environment variables                                          │
    │      └── ParserConfig.from_env()                                    │
    │                                                                      │
    │   4. Default values (in this dataclass)                             │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

The limits here exist because the parsers run over attacker-controlled
input: a request with a million headers or a JSON document nested a
million levels deep must fail fast instead of exhausting memory or the
interpreter stack.

=============================================================================
"""

import logging
import os
from dataclasses import dataclass


_TRUE_VALUES = {"1", "true", "yes", "on"}

# Each nesting level costs two interpreter frames; stay well below the
# default recursion limit of 1000.
MAX_JSON_DEPTH_LIMIT = 256


@dataclass(frozen=True)
class ParserConfig:
    """
    Configuration shared by the HTTP and JSON parsers.

    Instances are immutable, so a single config can be shared by any
    number of concurrent parses.
    """

    # ─────────────────────────────────────────────────────────────────────
    # HTTP SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    max_headers: int = 128
    """
    Maximum number of header fields in one header (or trailer) section.
    Exceeding it fails with LIMIT_EXCEEDED.
    """

    allow_bare_lf: bool = True
    """
    Accept a lone LF as a line terminator in addition to CRLF.
    RFC 9112 allows recipients to do so; many real clients rely on it.
    """

    # ─────────────────────────────────────────────────────────────────────
    # JSON SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    max_json_depth: int = 128
    """
    Maximum nesting depth of arrays/objects. Guards the recursive-descent
    parser against stack exhaustion. Capped at MAX_JSON_DEPTH_LIMIT.
    """

    allow_trailing_data: bool = False
    """
    If False, anything other than whitespace after the top-level JSON
    value fails with TRAILING_DATA. If True, parsing stops after the value
    and the rest of the buffer is left to the caller.
    """

    # ─────────────────────────────────────────────────────────────────────
    # LOGGING
    # ─────────────────────────────────────────────────────────────────────

    log_level: str = "WARNING"
    """Level for the "spanparse" logger namespace."""

    def __post_init__(self):
        self.validate()

    @classmethod
    def from_env(cls) -> "ParserConfig":
        """
        Create configuration from environment variables.

        SPANPARSE_MAX_HEADERS          (default: 128)
        SPANPARSE_ALLOW_BARE_LF        (default: true)
        SPANPARSE_MAX_JSON_DEPTH       (default: 128)
        SPANPARSE_ALLOW_TRAILING_DATA  (default: false)
        SPANPARSE_LOG_LEVEL            (default: WARNING)
        """
        return cls(
            max_headers=int(os.getenv("SPANPARSE_MAX_HEADERS", "128")),
            allow_bare_lf=os.getenv("SPANPARSE_ALLOW_BARE_LF", "true").lower() in _TRUE_VALUES,
            max_json_depth=int(os.getenv("SPANPARSE_MAX_JSON_DEPTH", "128")),
            allow_trailing_data=(
                os.getenv("SPANPARSE_ALLOW_TRAILING_DATA", "false").lower() in _TRUE_VALUES
            ),
            log_level=os.getenv("SPANPARSE_LOG_LEVEL", "WARNING"),
        )

    def validate(self) -> None:
        """Fail fast on nonsensical values."""
        if self.max_headers < 0:
            raise ValueError(f"max_headers must be >= 0, got {self.max_headers}")

        if not 1 <= self.max_json_depth <= MAX_JSON_DEPTH_LIMIT:
            raise ValueError(
                f"max_json_depth must be between 1 and {MAX_JSON_DEPTH_LIMIT}, "
                f"got {self.max_json_depth}"
            )

        if not isinstance(logging.getLevelName(self.log_level.upper()), int):
            raise ValueError(f"Unknown log level: {self.log_level}")


DEFAULT_CONFIG = ParserConfig()


def setup_logging(config: ParserConfig = DEFAULT_CONFIG) -> None:
    """Configure logging for the spanparse namespace."""
    level = getattr(logging, config.log_level.upper(), logging.WARNING)

    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    logging.getLogger("spanparse").setLevel(level)
