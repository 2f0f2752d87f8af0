"""
Bootstrap payload for the gateway instance.

The shell script is kept as a separate asset and rendered per product. It
reads the Telegram token from Secrets Manager and the model (plus guardrail
settings, when enabled) from Parameter Store, so no secret is ever part of the
rendered template.
"""
from pathlib import Path
from string import Template

from ..products import ProductIdentity

SCRIPT_PATH = Path(__file__).parent / "gateway-bootstrap.sh"

GUARDRAIL_LOOKUP = """
GUARDRAIL_ID=$(aws ssm get-parameter \\
  --name %%{guardrail_id_parameter} \\
  --region "$REGION" \\
  --query Parameter.Value \\
  --output text)
GUARDRAIL_VERSION=$(aws ssm get-parameter \\
  --name %%{guardrail_version_parameter} \\
  --region "$REGION" \\
  --query Parameter.Value \\
  --output text)
echo "Guardrail: $GUARDRAIL_ID (version $GUARDRAIL_VERSION)"
"""

GUARDRAIL_CONFIG = """,
    "guardrail": {
      "id": "$GUARDRAIL_ID",
      "version": "$GUARDRAIL_VERSION"
    }"""


class BootstrapTemplate(Template):
    """``%%{name}`` placeholders, leaving shell ``$VAR`` syntax alone."""
    delimiter = "%%"


def bootstrap_log_path(product: ProductIdentity) -> str:
    return f"/var/log/{product.slug}-bootstrap.log"


def log_group_name(product: ProductIdentity) -> str:
    return f"/{product.slug}/gateway"


def render_bootstrap(product: ProductIdentity, guardrails_enabled: bool) -> str:
    """
    Render the first-boot script for a product.

    Args:
        product: Product identity providing paths and package name
        guardrails_enabled: Also read the guardrail id and version

    Returns:
        Shell script text
    """
    values = {
        "name": product.name,
        "user": product.slug,
        "npm_package": product.npm_package,
        "bootstrap_log": bootstrap_log_path(product),
        "service_log": f"/var/log/{product.slug}/gateway.log",
        "log_group": log_group_name(product),
        "token_secret": product.secret_name("telegram-token"),
        "model_parameter": product.parameter_path("bedrock-model"),
        "guardrail_id_parameter": product.parameter_path("guardrail-id"),
        "guardrail_version_parameter": product.parameter_path("guardrail-version"),
    }

    if guardrails_enabled:
        values["guardrail_lookup"] = _fragment(GUARDRAIL_LOOKUP, values)
        values["guardrail_config"] = _fragment(GUARDRAIL_CONFIG, values)
    else:
        values["guardrail_lookup"] = ""
        values["guardrail_config"] = ""

    return BootstrapTemplate(SCRIPT_PATH.read_text()).substitute(values)


def _fragment(text: str, values: dict) -> str:
    return BootstrapTemplate(text).substitute(values)
