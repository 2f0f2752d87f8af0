"""
Product identities for the gateway variants.

Every product runs the same topology; only names, paths and the npm package
differ.
"""

from dataclasses import dataclass
from typing import Dict


@dataclass(frozen=True)
class ProductIdentity:
    """
    Naming and tagging identity for one gateway product.

    Attributes:
        name: Display name, also the cost-allocation tag value and metric namespace
        slug: Lowercase prefix for resource names, SSM paths and log groups
        npm_package: npm package installed on the host
    """
    name: str
    slug: str
    npm_package: str

    @property
    def stack_name(self) -> str:
        return f"{self.name}Stack"

    @property
    def metric_namespace(self) -> str:
        return self.name

    @property
    def cost_tag(self) -> str:
        """Budget cost filter value for the Application tag."""
        return f"user:Application${self.name}"

    def parameter_path(self, name: str) -> str:
        """SSM Parameter Store path, e.g. ``/openclaw/bedrock-model``."""
        return f"/{self.slug}/{name}"

    def secret_name(self, name: str) -> str:
        """Secrets Manager name, e.g. ``openclaw/telegram-token``."""
        return f"{self.slug}/{name}"

    def resource_name(self, resource: str) -> str:
        """Physical resource name, e.g. ``openclaw-gateway-sg``."""
        return f"{self.slug}-{resource}"

    def logical_id(self, suffix: str) -> str:
        """CloudFormation logical id, e.g. ``OpenClawInstance``."""
        return f"{self.name}{suffix}"


PRODUCTS: Dict[str, ProductIdentity] = {
    "openclaw": ProductIdentity(name="OpenClaw", slug="openclaw", npm_package="openclaw"),
    "clawdbot": ProductIdentity(name="Clawdbot", slug="clawdbot", npm_package="clawdbot"),
    "moltbot": ProductIdentity(name="Moltbot", slug="moltbot", npm_package="moltbot"),
}

DEFAULT_PRODUCT = "openclaw"
