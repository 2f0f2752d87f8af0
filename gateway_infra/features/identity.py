"""
Instance role with least-privilege base permissions.

Later features add their own statements through ``ResourceGraph.grant``; the
composer attaches everything granted as a single policy once the pipeline has
run, so the policy only ever holds what the enabled feature set needs.
"""
from typing import List

from aws_cdk import (
    ArnFormat,
    Stack,
    aws_iam as iam
)

from ..graph import ResourceGraph, ResourceKind
from ..settings import GatewayConfig
from ..tags import tag_resource
from .base import logical_ids

FEATURE = "identity"


def base_statements(graph: ResourceGraph, config: GatewayConfig) -> List[iam.PolicyStatement]:
    product = config.product
    stack = Stack.of(graph.scope)
    return [
        iam.PolicyStatement(
            sid="BedrockInvokeModel",
            effect=iam.Effect.ALLOW,
            actions=["bedrock:InvokeModel", "bedrock:InvokeModelWithResponseStream"],
            resources=[
                stack.format_arn(
                    service="bedrock",
                    account="",
                    resource="foundation-model",
                    resource_name=config.ai_model
                )
            ]
        ),
        iam.PolicyStatement(
            sid="SSMParameterReadOnly",
            effect=iam.Effect.ALLOW,
            actions=["ssm:GetParameter", "ssm:GetParameters"],
            resources=[stack.format_arn(service="ssm", resource="parameter", resource_name=f"{product.slug}/*")]
        ),
        iam.PolicyStatement(
            sid="CloudWatchLogsWrite",
            effect=iam.Effect.ALLOW,
            actions=[
                "logs:CreateLogGroup",
                "logs:CreateLogStream",
                "logs:PutLogEvents",
                "logs:DescribeLogStreams"
            ],
            resources=[
                stack.format_arn(
                    service="logs",
                    resource="log-group",
                    resource_name=f"/{product.slug}/*",
                    arn_format=ArnFormat.COLON_RESOURCE_NAME
                )
            ]
        ),
        # PutMetricData has no resource-level permissions
        iam.PolicyStatement(
            sid="CloudWatchMetricsWrite",
            effect=iam.Effect.ALLOW,
            actions=["cloudwatch:PutMetricData"],
            resources=["*"],
            conditions={"StringEquals": {"cloudwatch:namespace": product.metric_namespace}}
        ),
    ]


def apply(graph: ResourceGraph, config: GatewayConfig) -> ResourceGraph:
    product = config.product
    ids = logical_ids(product)

    role = iam.Role(
        graph.scope,
        ids.role,
        role_name=f"{product.name}GatewayRole",
        assumed_by=iam.ServicePrincipal("ec2.amazonaws.com"),
        description=f"IAM role for {product.name} EC2 instance - Bedrock + SSM + CloudWatch",
        managed_policies=[
            # Session Manager access instead of SSH
            iam.ManagedPolicy.from_aws_managed_policy_name("AmazonSSMManagedInstanceCore")
        ]
    )
    tag_resource(role, f"{product.name}GatewayRole")

    profile = iam.InstanceProfile(graph.scope, ids.instance_profile, role=role)

    graph = (
        graph.add(ResourceKind.IDENTITY, role, feature=FEATURE)
        .add(ResourceKind.INSTANCE_PROFILE, profile, feature=FEATURE)
    )
    for statement in base_statements(graph, config):
        graph = graph.grant(ids.role, statement)
    return graph


def attach_policy(graph: ResourceGraph, config: GatewayConfig) -> ResourceGraph:
    """
    Attach every statement granted to the instance role as one inline policy.

    The instance waits for the policy so the bootstrap script never runs with
    a partial permission set.
    """
    product = config.product
    ids = logical_ids(product)

    policy = iam.Policy(
        graph.scope,
        ids.instance_policy,
        policy_name=product.resource_name("gateway-policy"),
        statements=graph.statements(ids.role),
        roles=[graph.get(ids.role)]
    )
    if ids.instance in graph:
        graph.get(ids.instance).node.add_dependency(policy)

    return graph.add(ResourceKind.POLICY, policy, feature=FEATURE)
