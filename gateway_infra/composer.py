"""
Stack composer.

Builds every resource of one gateway deployment in a stack by running the
feature pipeline in its fixed order, attaching the instance policy collected
along the way, and deriving the stack outputs from the finished graph.
Composition is deterministic: the same configuration always synthesizes the
same template.
"""
import logging
from typing import List

from aws_cdk import Fn
from constructs import Construct

from .bootstrap import log_group_name
from .cost import estimate_monthly_cost
from .features import FEATURE_PIPELINE, identity, logical_ids
from .features.base import TELEGRAM_TOKEN_PARAMETER
from .graph import Output, ResourceGraph
from .settings import GatewayConfig

logger = logging.getLogger(__name__)


def compose(scope: Construct, config: GatewayConfig) -> ResourceGraph:
    """
    Compose the gateway resources for a validated configuration.

    Args:
        scope: Stack the constructs are created in
        config: Resolved configuration

    Returns:
        ResourceGraph: Registered constructs and outputs

    Raises:
        ConstraintViolation: If a feature breaks a graph invariant
    """
    logger.info(
        "Composing %s gateway (guardrails=%s, schedule=%s, weekendShutdown=%s, spot=%s)",
        config.product.name,
        config.enable_content_guardrails,
        config.schedule_enabled,
        config.weekend_shutdown_active,
        config.use_spot_pricing,
    )

    graph = ResourceGraph(scope)
    for name, feature in FEATURE_PIPELINE:
        before = len(graph)
        graph = feature(graph, config)
        logger.debug("Applied feature %s (%d new resources)", name, len(graph) - before)

    graph = identity.attach_policy(graph, config)

    for output in build_outputs(graph, config):
        graph = graph.with_output(output)

    logger.info("Composed %d resources and %d outputs", len(graph), len(graph.outputs))
    return graph


def build_outputs(graph: ResourceGraph, config: GatewayConfig) -> List[Output]:
    """Outputs for the finished graph; optional ones follow the enabled features."""
    product = config.product
    ids = logical_ids(product)
    instance = graph.get(ids.instance)

    def output(key: str, value: str, description: str) -> Output:
        return Output(key, value, description, export_name=f"{product.name}{key}")

    estimate = estimate_monthly_cost(config)
    outputs = [
        output("InstanceId", instance.ref, f"EC2 Instance ID for {product.name} gateway"),
        output("InstancePublicIp", instance.attr_public_ip, "Public IP (outbound only, no inbound access)"),
        output(
            "ConnectCommand",
            Fn.join("", ["aws ssm start-session --target ", instance.ref]),
            "Connect via AWS Systems Manager Session Manager (no SSH)",
        ),
        output(
            "LogsCommand",
            f"aws logs tail {log_group_name(product)} --follow",
            f"Stream {product.name} gateway logs",
        ),
        output(
            "ServiceStatusCommand",
            Fn.join("", [
                "aws ssm send-command --instance-ids ",
                instance.ref,
                " --document-name AWS-RunShellScript "
                f"--parameters commands='systemctl status {product.slug}'",
            ]),
            f"Check the {product.name} service status",
        ),
        output(
            "TelegramTokenSecretArn",
            graph.get(ids.token_secret).secret_arn,
            "Secrets Manager ARN holding the Telegram bot token",
        ),
        output(
            "SecurityGroupId",
            graph.get(ids.security_group).security_group_id,
            "Security Group ID (zero inbound rules)",
        ),
        output("EstimatedMonthlyCost", estimate.describe(), "Estimated monthly EC2 cost"),
        output(
            "SpotInstanceEnabled",
            "true" if config.use_spot_pricing else "false",
            "Whether the instance runs on a persistent spot request",
        ),
        output("DeploymentNotes", deployment_notes(config), "Post-deployment steps"),
    ]

    if config.enable_content_guardrails:
        outputs.append(
            output(
                "GuardrailId",
                graph.get(ids.guardrail).attr_guardrail_id,
                "Bedrock Guardrail ID for content filtering",
            )
        )

    if config.schedule_enabled:
        outputs.append(output("ShutdownSchedule", shutdown_schedule(config), "Power schedule (UTC)"))
        outputs.append(
            output(
                "PowerControlFunctionArn",
                graph.get(ids.power_control_function).function_arn,
                "Lambda function that stops and starts the instance",
            )
        )

    return outputs


def shutdown_schedule(config: GatewayConfig) -> str:
    schedule = f"Shutdown: {config.shutdown_hour}:00 UTC, Startup: {config.startup_hour}:00 UTC"
    if config.weekend_shutdown_active:
        schedule += ", Weekends: off from Friday 18:00 UTC"
    return schedule


def deployment_notes(config: GatewayConfig) -> str:
    product = config.product
    notes = (
        f"Pass the bot token at deploy time with --parameters {TELEGRAM_TOKEN_PARAMETER}=<token>; "
        "the synth-time telegramToken is only validated, never written to the template. "
        f"{product.name} installs on first boot (about 5 minutes); "
        f"follow progress in {log_group_name(product)}. "
        "Use ConnectCommand for shell access; the security group allows no inbound traffic."
    )
    if not config.budget_alert_email:
        notes += " No budgetAlertEmail set: budget alerts are disabled."
    return notes
