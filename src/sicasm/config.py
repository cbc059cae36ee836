"""
Assembler Configuration
=======================

Policy settings for an assembly run. The defaults reproduce the classic
teaching-assembler behaviour: an undefined operand assembles as address
0000, and a redefined label silently takes its newest address.

Configuration can come from:
- Default values (defined here)
- Environment variables (AssemblerConfig.from_env)
- Command-line flags (sicasm --strict, --no-duplicates)

Environment variables (all optional):
    SICASM_STRICT_SYMBOLS:    "1"/"true"/"yes" selects SymbolPolicy.STRICT
    SICASM_DUPLICATE_LABELS:  "overwrite" or "error"
"""

from dataclasses import dataclass
from enum import Enum
import logging
import os


logger = logging.getLogger(__name__)

_TRUE_VALUES = frozenset({"1", "true", "yes", "on"})


class SymbolPolicy(Enum):
    """How pass two treats an operand that names no defined label."""
    LENIENT = "lenient"  # resolve to 0000 and log a warning
    STRICT = "strict"    # raise UndefinedSymbolError


class DuplicatePolicy(Enum):
    """How pass one treats a label that is defined a second time."""
    OVERWRITE = "overwrite"  # last definition wins
    ERROR = "error"          # raise DuplicateSymbolError


@dataclass
class AssemblerConfig:
    """
    Configuration for one assembler run.

    Attributes:
        undefined_symbols: Policy for unresolved operand symbols
        duplicate_labels: Policy for label redefinition
    """
    undefined_symbols: SymbolPolicy = SymbolPolicy.LENIENT
    duplicate_labels: DuplicatePolicy = DuplicatePolicy.OVERWRITE

    @property
    def strict_symbols(self) -> bool:
        return self.undefined_symbols is SymbolPolicy.STRICT

    @classmethod
    def from_env(cls) -> "AssemblerConfig":
        """
        Create an AssemblerConfig from environment variables.

        Unrecognised values are ignored (with a warning) and the default
        policy is kept.
        """
        config = cls()

        if strict := os.environ.get("SICASM_STRICT_SYMBOLS"):
            if strict.strip().lower() in _TRUE_VALUES:
                config.undefined_symbols = SymbolPolicy.STRICT

        if duplicates := os.environ.get("SICASM_DUPLICATE_LABELS"):
            try:
                config.duplicate_labels = DuplicatePolicy(duplicates.strip().lower())
            except ValueError:
                logger.warning(
                    f"Ignoring SICASM_DUPLICATE_LABELS={duplicates!r} "
                    f"(expected 'overwrite' or 'error')"
                )

        return config
