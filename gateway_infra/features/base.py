"""Shared names for the feature transforms."""
from dataclasses import dataclass
from typing import Callable

from ..graph import ResourceGraph
from ..products import ProductIdentity
from ..settings import GatewayConfig

Feature = Callable[[ResourceGraph, GatewayConfig], ResourceGraph]

TELEGRAM_TOKEN_PARAMETER = "TelegramBotToken"


@dataclass(frozen=True)
class LogicalIds:
    """Construct ids for one product."""
    vpc: str
    subnet: str
    security_group: str
    role: str
    instance_profile: str
    instance_policy: str
    token_secret: str
    model_parameter: str
    guardrail: str
    guardrail_id_parameter: str
    guardrail_version_parameter: str
    launch_template: str
    instance: str
    health_alarm: str
    cpu_alarm: str
    log_group: str
    budget: str
    power_control_role: str
    power_control_function: str


def logical_ids(product: ProductIdentity) -> LogicalIds:
    name = product.logical_id
    return LogicalIds(
        vpc=name("VPC"),
        subnet=name("PublicSubnet"),
        security_group=name("SecurityGroup"),
        role=name("InstanceRole"),
        instance_profile=name("InstanceProfile"),
        instance_policy=name("InstancePolicy"),
        token_secret="TelegramTokenSecret",
        model_parameter="BedrockModelParameter",
        guardrail=name("Guardrail"),
        guardrail_id_parameter="GuardrailIdParameter",
        guardrail_version_parameter="GuardrailVersionParameter",
        launch_template=name("LaunchTemplate"),
        instance=name("Instance"),
        health_alarm="InstanceHealthAlarm",
        cpu_alarm="CPUUtilizationAlarm",
        log_group=name("LogGroup"),
        budget=name("Budget"),
        power_control_role="PowerControlRole",
        power_control_function="PowerControlFunction",
    )
