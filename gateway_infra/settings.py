"""
Configuration loading and validation.

Raw values come from a per-product parameter file, CDK context (``-c key=value``)
and the environment. Every option is checked before any resource is composed;
all violations are reported together in one ConfigurationError.
"""
import json
import logging
import math
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping, Optional, Tuple

from .exceptions import ConfigurationError
from .products import DEFAULT_PRODUCT, PRODUCTS, ProductIdentity

logger = logging.getLogger(__name__)

CONFIG_DIR = Path(__file__).parent / "config"

BEDROCK_MODELS: Tuple[str, ...] = (
    "anthropic.claude-sonnet-4-5-v2",
    "anthropic.claude-opus-4-5-v2",
    "anthropic.claude-3-5-sonnet-20241022-v2:0",
)

INSTANCE_SIZES: Tuple[str, ...] = ("t3.micro", "t3.small", "t3.medium")

TELEGRAM_TOKEN_PATTERN = r"^[0-9]{5,}:[A-Za-z0-9_-]{20,}$"
EMAIL_PATTERN = r"^$|^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$"


@dataclass(frozen=True)
class ParameterSpec:
    """
    Declared configuration option.

    Attributes:
        name: Key as supplied on the command line or in the parameter file
        field: Attribute name on GatewayConfig
        type: One of string, number, integer, bool, enum
        default: Value used when the key is absent
        allowed_values: Accepted values for enum options
        min_value: Inclusive lower bound for numeric options
        max_value: Inclusive upper bound for numeric options
        exclusive_minimum: Exclusive lower bound for numeric options
        pattern: Regular expression a string value must match
        required: Reject a missing or empty value
        secret: Never echo the value
        constraint_description: Message used when the pattern check fails
    """
    name: str
    field: str
    type: str
    default: Any = None
    allowed_values: Tuple[str, ...] = ()
    min_value: Optional[float] = None
    max_value: Optional[float] = None
    exclusive_minimum: Optional[float] = None
    pattern: Optional[str] = None
    required: bool = False
    secret: bool = False
    constraint_description: str = ""

    def resolve(self, raw: Any) -> Any:
        """Coerce a raw value to the declared type and check its constraint.

        Raises:
            ValueError: If the value is missing, malformed or out of bounds.
                The message never contains a secret value.
        """
        if raw is None:
            if self.required:
                raise ValueError("is required")
            raw = self.default

        if self.type == "bool":
            return self._to_bool(raw)
        if self.type in ("number", "integer"):
            return self._check_bounds(self._to_number(raw))
        if self.type == "enum":
            value = str(raw)
            if value not in self.allowed_values:
                raise ValueError(f"must be one of {', '.join(self.allowed_values)} (got {value!r})")
            return value

        if not isinstance(raw, str):
            raise ValueError("must be a string")
        if self.required and not raw:
            raise ValueError("is required")
        if self.pattern and not re.fullmatch(self.pattern, raw):
            if self.secret:
                raise ValueError(self.constraint_description or "has an invalid format")
            raise ValueError(f"{self.constraint_description or 'has an invalid format'} (got {raw!r})")
        return raw

    def _to_bool(self, raw: Any) -> bool:
        if isinstance(raw, bool):
            return raw
        if isinstance(raw, str) and raw.strip().lower() in ("true", "false"):
            return raw.strip().lower() == "true"
        raise ValueError(f"must be true or false (got {raw!r})")

    def _to_number(self, raw: Any):
        if isinstance(raw, bool):
            raise ValueError(f"must be a number (got {raw!r})")
        try:
            value = float(raw)
        except (TypeError, ValueError):
            raise ValueError(f"must be a number (got {raw!r})") from None
        if math.isnan(value) or math.isinf(value):
            raise ValueError(f"must be a finite number (got {raw!r})")

        if self.type == "integer":
            if not value.is_integer():
                raise ValueError(f"must be a whole number (got {raw!r})")
            return int(value)
        return int(value) if value.is_integer() else value

    def _check_bounds(self, value):
        if self.min_value is not None and value < self.min_value:
            raise ValueError(f"must be between {self.min_value} and {self.max_value} (got {value})")
        if self.max_value is not None and value > self.max_value:
            raise ValueError(f"must be between {self.min_value} and {self.max_value} (got {value})")
        if self.exclusive_minimum is not None and value <= self.exclusive_minimum:
            raise ValueError(f"must be greater than {self.exclusive_minimum} (got {value})")
        return value


PARAMETERS: Tuple[ParameterSpec, ...] = (
    ParameterSpec("product", "product", "enum", default=DEFAULT_PRODUCT,
                  allowed_values=tuple(PRODUCTS)),
    ParameterSpec("telegramToken", "telegram_token", "string", required=True, secret=True,
                  pattern=TELEGRAM_TOKEN_PATTERN,
                  constraint_description="must be a valid Telegram bot token (<bot id>:<secret>)"),
    ParameterSpec("aiModel", "ai_model", "enum", default=BEDROCK_MODELS[0],
                  allowed_values=BEDROCK_MODELS),
    ParameterSpec("instanceSize", "instance_size", "enum", default=INSTANCE_SIZES[0],
                  allowed_values=INSTANCE_SIZES),
    ParameterSpec("monthlyBudgetLimit", "monthly_budget_limit", "number", default=50,
                  min_value=10, max_value=500),
    ParameterSpec("enableContentGuardrails", "enable_content_guardrails", "bool", default=False),
    ParameterSpec("budgetAlertEmail", "budget_alert_email", "string", default="",
                  pattern=EMAIL_PATTERN,
                  constraint_description="must be a valid email address or empty"),
    ParameterSpec("scheduleEnabled", "schedule_enabled", "bool", default=False),
    ParameterSpec("shutdownHour", "shutdown_hour", "integer", default=22,
                  min_value=0, max_value=23),
    ParameterSpec("startupHour", "startup_hour", "integer", default=8,
                  min_value=0, max_value=23),
    ParameterSpec("weekendShutdownEnabled", "weekend_shutdown_enabled", "bool", default=False),
    ParameterSpec("useSpotPricing", "use_spot_pricing", "bool", default=False),
    ParameterSpec("spotMaxHourlyPrice", "spot_max_hourly_price", "number", default=0.005,
                  exclusive_minimum=0),
)

PARAMETER_NAMES = tuple(spec.name for spec in PARAMETERS)


@dataclass(frozen=True)
class GatewayConfig:
    """
    Fully resolved configuration for one synthesis pass.

    Every field is checked against its ParameterSpec on construction, so an
    instance is always valid. ``product`` may be given as a ProductIdentity or
    as its slug; string values coming from CDK context are coerced.

    Raises:
        ConfigurationError: Listing every violated constraint
    """
    product: ProductIdentity
    telegram_token: str = field(repr=False)
    ai_model: str = BEDROCK_MODELS[0]
    instance_size: str = INSTANCE_SIZES[0]
    monthly_budget_limit: float = 50
    enable_content_guardrails: bool = False
    budget_alert_email: str = ""
    schedule_enabled: bool = False
    shutdown_hour: int = 22
    startup_hour: int = 8
    weekend_shutdown_enabled: bool = False
    use_spot_pricing: bool = False
    spot_max_hourly_price: float = 0.005

    def __post_init__(self) -> None:
        violations = []
        failed = set()
        for spec in PARAMETERS:
            value = getattr(self, spec.field)
            if isinstance(value, ProductIdentity):
                if value not in PRODUCTS.values():
                    violations.append(f"{spec.name}: must be one of {', '.join(PRODUCTS)}")
                continue
            try:
                value = spec.resolve(value)
            except ValueError as exc:
                violations.append(f"{spec.name}: {exc}")
                failed.add(spec.name)
                continue
            if spec.field == "product":
                value = PRODUCTS[value]
            object.__setattr__(self, spec.field, value)

        schedule_fields = {"scheduleEnabled", "shutdownHour", "startupHour"}
        if not schedule_fields & failed and self.schedule_enabled and self.shutdown_hour == self.startup_hour:
            violations.append("startupHour: must differ from shutdownHour when scheduleEnabled is true")

        if violations:
            raise ConfigurationError(violations)

    @property
    def weekend_shutdown_active(self) -> bool:
        return self.schedule_enabled and self.weekend_shutdown_enabled


def resolve_config(raw: Mapping[str, Any]) -> GatewayConfig:
    """
    Validate raw key/value pairs and build a GatewayConfig.

    Args:
        raw: Option values keyed by their external names; absent keys take
            their defaults, unknown keys are ignored

    Returns:
        GatewayConfig: Validated configuration

    Raises:
        ConfigurationError: Listing every violated constraint
    """
    unknown = sorted(set(raw) - set(PARAMETER_NAMES))
    if unknown:
        logger.debug("Ignoring unknown configuration keys: %s", ", ".join(unknown))

    return GatewayConfig(**{spec.field: raw.get(spec.name) for spec in PARAMETERS})


def load_parameter_file(product: str) -> dict:
    """Load the parameter file for the given product."""
    if product not in PRODUCTS:
        return {}

    config_file = CONFIG_DIR / f"{product}.json"
    try:
        with open(config_file, "r") as f:
            return json.load(f)
    except FileNotFoundError:
        logger.warning("No parameter file at %s, using defaults", config_file)
        return {"product": product}
