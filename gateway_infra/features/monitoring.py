"""Health and CPU alarms on the gateway instance, plus its log group."""
from aws_cdk import (
    Duration,
    RemovalPolicy,
    aws_cloudwatch as cloudwatch,
    aws_logs as logs
)
from constructs import Construct

from ..bootstrap import log_group_name
from ..graph import ResourceGraph, ResourceKind
from ..settings import GatewayConfig
from ..tags import tag_resource
from .base import logical_ids

FEATURE = "monitoring"

ALARM_PERIOD = Duration.minutes(5)


def _instance_alarm(
    scope: Construct,
    logical_id: str,
    instance_id: str,
    alarm_name: str,
    description: str,
    metric_name: str,
    statistic: str,
    threshold: float,
    evaluation_periods: int,
) -> cloudwatch.Alarm:
    metric = cloudwatch.Metric(
        namespace="AWS/EC2",
        metric_name=metric_name,
        dimensions_map={"InstanceId": instance_id},
        statistic=statistic,
        period=ALARM_PERIOD
    )
    return cloudwatch.Alarm(
        scope,
        logical_id,
        alarm_name=alarm_name,
        alarm_description=description,
        metric=metric,
        threshold=threshold,
        evaluation_periods=evaluation_periods,
        comparison_operator=cloudwatch.ComparisonOperator.GREATER_THAN_OR_EQUAL_TO_THRESHOLD,
        treat_missing_data=cloudwatch.TreatMissingData.NOT_BREACHING
    )


def apply(graph: ResourceGraph, config: GatewayConfig) -> ResourceGraph:
    product = config.product
    ids = logical_ids(product)
    instance_id = graph.get(ids.instance).ref

    health_alarm = _instance_alarm(
        graph.scope,
        ids.health_alarm,
        instance_id,
        alarm_name=product.resource_name("instance-health"),
        description=f"Alert when {product.name} instance fails health checks",
        metric_name="StatusCheckFailed",
        statistic=cloudwatch.Stats.MAXIMUM,
        threshold=1,
        evaluation_periods=2,
    )

    # Detect runaway processes
    cpu_alarm = _instance_alarm(
        graph.scope,
        ids.cpu_alarm,
        instance_id,
        alarm_name=product.resource_name("cpu-high"),
        description="Alert when CPU utilization exceeds 90% for 15 minutes",
        metric_name="CPUUtilization",
        statistic=cloudwatch.Stats.AVERAGE,
        threshold=90,
        evaluation_periods=3,
    )

    log_group = logs.LogGroup(
        graph.scope,
        ids.log_group,
        log_group_name=log_group_name(product),
        retention=logs.RetentionDays.ONE_WEEK,
        removal_policy=RemovalPolicy.DESTROY
    )
    tag_resource(log_group, log_group_name(product))

    return (
        graph.add(ResourceKind.ALARM, health_alarm, feature=FEATURE)
        .add(ResourceKind.ALARM, cpu_alarm, feature=FEATURE)
        .add(ResourceKind.LOG_SINK, log_group, feature=FEATURE)
    )
