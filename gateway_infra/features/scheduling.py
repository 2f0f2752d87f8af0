"""
Nightly (and optionally weekend) stop/start of the gateway instance.

EventBridge rules invoke a small power-control Lambda with ``{"action": ...}``.
All cron expressions are evaluated in UTC.

With weekend shutdown enabled, Monday morning is covered by both the weekday
startup rule and the Monday startup rule. Both fire at the same hour; starting
an instance that is already pending or running is a no-op for EC2, so the
second invocation only logs the current state.
"""
from pathlib import Path
from typing import List, Optional, Tuple

from aws_cdk import (
    Duration,
    Stack,
    aws_events as events,
    aws_events_targets as targets,
    aws_iam as iam,
    aws_lambda as lambda_
)

from ..graph import ResourceGraph, ResourceKind
from ..settings import GatewayConfig
from ..tags import tag_resource
from .base import logical_ids

FEATURE = "scheduling"

LAMBDA_DIR = Path(__file__).resolve().parent.parent / "lambdas" / "power_control"
LAMBDA_TIMEOUT = Duration.seconds(30)
WEEKEND_SHUTDOWN_HOUR = 18


def schedule(hour: int, weekdays: Optional[str] = None) -> events.Schedule:
    """EventBridge schedule firing at ``hour``:00 UTC, optionally on ``weekdays`` only."""
    return events.Schedule.cron(minute="0", hour=str(hour), week_day=weekdays)


def schedule_rules(config: GatewayConfig) -> List[Tuple[str, events.Schedule, str, str]]:
    """(construct id, schedule, action, description) for each rule."""
    weekdays = "MON-FRI" if config.weekend_shutdown_enabled else None
    name = config.product.name
    rules = [
        ("NightlyShutdownRule", schedule(config.shutdown_hour, weekdays), "stop",
         f"Stop {name} instance at {config.shutdown_hour}:00 UTC"),
        ("MorningStartupRule", schedule(config.startup_hour, weekdays), "start",
         f"Start {name} instance at {config.startup_hour}:00 UTC"),
    ]
    if config.weekend_shutdown_enabled:
        rules += [
            ("WeekendShutdownRule", schedule(WEEKEND_SHUTDOWN_HOUR, "FRI"), "stop",
             f"Stop {name} instance for the weekend"),
            ("MondayStartupRule", schedule(config.startup_hour, "MON"), "start",
             f"Start {name} instance on Monday morning"),
        ]
    return rules


def apply(graph: ResourceGraph, config: GatewayConfig) -> ResourceGraph:
    if not config.schedule_enabled:
        return graph

    product = config.product
    ids = logical_ids(product)
    instance = graph.get(ids.instance)

    role = iam.Role(
        graph.scope,
        ids.power_control_role,
        assumed_by=iam.ServicePrincipal("lambda.amazonaws.com"),
        description=f"Scheduled stop/start of the {product.name} instance",
        managed_policies=[
            iam.ManagedPolicy.from_aws_managed_policy_name("service-role/AWSLambdaBasicExecutionRole")
        ],
        inline_policies={
            product.resource_name("power-control-policy"): iam.PolicyDocument(
                statements=[
                    iam.PolicyStatement(
                        sid="InstancePowerControl",
                        effect=iam.Effect.ALLOW,
                        actions=["ec2:StartInstances", "ec2:StopInstances"],
                        resources=[
                            Stack.of(graph.scope).format_arn(
                                service="ec2", resource="instance", resource_name=instance.ref
                            )
                        ]
                    )
                ]
            )
        }
    )
    tag_resource(role, product.resource_name("power-control"))

    function = lambda_.Function(
        graph.scope,
        ids.power_control_function,
        function_name=product.resource_name("power-control"),
        description=f"Stops and starts the {product.name} instance on a schedule",
        runtime=lambda_.Runtime.PYTHON_3_11,
        handler="handler.lambda_handler",
        code=lambda_.Code.from_asset(str(LAMBDA_DIR), exclude=["__pycache__", "*.pyc"]),
        role=role,
        timeout=LAMBDA_TIMEOUT,
        environment={
            "INSTANCE_ID": instance.ref,
            "LOG_LEVEL": "INFO"
        }
    )
    tag_resource(function, product.resource_name("power-control"))

    graph = (
        graph.add(ResourceKind.AUTOMATION, role, feature=FEATURE)
        .add(ResourceKind.AUTOMATION, function, feature=FEATURE)
    )

    # Each target also grants EventBridge permission to invoke the function
    for rule_id, rule_schedule, action, description in schedule_rules(config):
        rule = events.Rule(
            graph.scope,
            rule_id,
            description=description,
            schedule=rule_schedule,
            targets=[
                targets.LambdaFunction(
                    function,
                    event=events.RuleTargetInput.from_object({"action": action})
                )
            ]
        )
        graph = graph.add(ResourceKind.SCHEDULE, rule, feature=FEATURE)

    return graph
