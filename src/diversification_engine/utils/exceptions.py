"""
Exception Hierarchy for Boundary Validation
===========================================
The engine is advisory: malformed data degrades to conservative defaults
(zero scores, empty opportunity lists). The only hard failures are type
errors at the function boundary, raised through this hierarchy so callers
can catch every engine failure with a single except clause.
"""

from typing import Any, Optional


# =============================================================================
# BASE EXCEPTION HIERARCHY
# =============================================================================

class DiversificationEngineError(Exception):
    """
    Base exception for the diversification engine.

    All engine exceptions inherit from this.
    """
    pass


class PortfolioValidationError(DiversificationEngineError, ValueError):
    """
    Raised when an input has the wrong type at the engine boundary.

    Examples: a balance whose value is a string, a chain id that is not an
    integer, a portfolio that is not a mapping.

    Args:
        message: Human-readable explanation
        field: Dotted path of the offending field (e.g. "chains[0].balances[2].valueUSD")
        value: The rejected value
    """

    def __init__(self, message: str, field: Optional[str] = None, value: Any = None):
        self.field = field
        self.value = value

        parts = [message]
        if field:
            parts.append(f"field={field}")
        if value is not None:
            parts.append(f"value={value!r}")

        super().__init__(" | ".join(parts))


class InflationTableError(PortfolioValidationError):
    """Raised when the inflation table is not a region -> record mapping."""
    pass


class ActionPayloadError(PortfolioValidationError):
    """
    Raised when a loose action payload cannot be mapped onto any action variant
    (unknown kind, or a required field for that kind is missing).
    """
    pass


class ConfigurationError(DiversificationEngineError):
    """Raised for unreadable config files or out-of-range settings."""
    pass
