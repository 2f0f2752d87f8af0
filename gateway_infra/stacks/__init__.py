"""CDK Stack definitions for the Telegram gateway."""

from .gateway_stack import GatewayStack

__all__ = [
    "GatewayStack"
]
