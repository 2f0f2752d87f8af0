"""Error types raised while resolving configuration and composing the stack."""
from typing import Iterable, List


class GatewayInfraError(Exception):
    """Base class for gateway infrastructure errors."""


class ConfigurationError(GatewayInfraError):
    """Invalid or missing configuration input.

    Carries every violated constraint so all problems can be fixed in one pass.
    """

    def __init__(self, violations: Iterable[str]) -> None:
        self.violations: List[str] = list(violations)
        summary = "; ".join(self.violations) or "invalid configuration"
        super().__init__(f"{len(self.violations)} configuration error(s): {summary}")


class ConstraintViolation(GatewayInfraError):
    """An internal composition invariant would be broken."""
