"""CDK infrastructure for the Telegram-to-Bedrock gateway host."""

from .exceptions import ConfigurationError, ConstraintViolation, GatewayInfraError
from .settings import GatewayConfig, resolve_config
from .composer import compose

__all__ = [
    "ConfigurationError",
    "ConstraintViolation",
    "GatewayInfraError",
    "GatewayConfig",
    "resolve_config",
    "compose",
]
