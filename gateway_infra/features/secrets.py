"""Telegram token secret and model selection parameter."""
from aws_cdk import (
    CfnParameter,
    SecretValue,
    aws_iam as iam,
    aws_secretsmanager as secretsmanager,
    aws_ssm as ssm
)

from ..graph import ResourceGraph, ResourceKind
from ..settings import TELEGRAM_TOKEN_PATTERN, GatewayConfig
from ..tags import tag_resource
from .base import TELEGRAM_TOKEN_PARAMETER, logical_ids

FEATURE = "secrets"


def apply(graph: ResourceGraph, config: GatewayConfig) -> ResourceGraph:
    product = config.product
    ids = logical_ids(product)

    # The token value is supplied at deploy time and never written to the template
    token = CfnParameter(
        graph.scope,
        TELEGRAM_TOKEN_PARAMETER,
        type="String",
        description="Telegram Bot Token (get from @BotFather)",
        no_echo=True,
        allowed_pattern=TELEGRAM_TOKEN_PATTERN,
        constraint_description="Must be a valid Telegram Bot Token"
    )

    secret = secretsmanager.Secret(
        graph.scope,
        ids.token_secret,
        secret_name=product.secret_name("telegram-token"),
        description=f"Telegram Bot Token for {product.name} (KMS encrypted)",
        secret_string_value=SecretValue.cfn_parameter(token)
    )
    tag_resource(secret, product.secret_name("telegram-token"))

    model_parameter = ssm.StringParameter(
        graph.scope,
        ids.model_parameter,
        parameter_name=product.parameter_path("bedrock-model"),
        string_value=config.ai_model,
        description="Bedrock model identifier",
        tier=ssm.ParameterTier.STANDARD
    )

    graph = (
        graph.add(ResourceKind.SECRET, secret, feature=FEATURE)
        .add(ResourceKind.PARAMETER, model_parameter, feature=FEATURE)
    )

    return graph.grant(
        ids.role,
        iam.PolicyStatement(
            sid="TelegramTokenRead",
            effect=iam.Effect.ALLOW,
            actions=["secretsmanager:GetSecretValue"],
            resources=[secret.secret_arn]
        )
    )
