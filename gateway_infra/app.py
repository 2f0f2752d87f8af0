#!/usr/bin/env python3
import logging
import os
import sys

import aws_cdk as cdk

from gateway_infra.exceptions import ConfigurationError
from gateway_infra.features.base import TELEGRAM_TOKEN_PARAMETER
from gateway_infra.products import DEFAULT_PRODUCT
from gateway_infra.settings import PARAMETER_NAMES, load_parameter_file, resolve_config
from gateway_infra.stacks import GatewayStack
from gateway_infra.tags import stack_tags

logger = logging.getLogger(__name__)


def collect_raw_config(app: cdk.App) -> dict:
    """
    Parameter file values overlaid with CDK context and the token from the environment.

    The token collected here is only validated at synth time. The template
    never contains it: the deployed secret is filled from the NoEcho
    ``TelegramBotToken`` parameter, so the same token has to be passed again
    with ``cdk deploy --parameters TelegramBotToken=<token>``.
    """
    product = app.node.try_get_context("product") or DEFAULT_PRODUCT

    raw = load_parameter_file(product)
    raw["product"] = product
    for name in PARAMETER_NAMES:
        value = app.node.try_get_context(name)
        if value is not None:
            raw[name] = value

    if not raw.get("telegramToken"):
        raw["telegramToken"] = os.environ.get("TELEGRAM_BOT_TOKEN", "")
    return raw


def main() -> None:
    logging.basicConfig(
        level=os.environ.get("LOG_LEVEL", "INFO"),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = cdk.App()

    try:
        config = resolve_config(collect_raw_config(app))
    except ConfigurationError as exc:
        for violation in exc.violations:
            logger.error("Invalid configuration: %s", violation)
        sys.exit(1)

    product = config.product
    GatewayStack(
        app,
        product.stack_name,
        config,
        description=f"{product.name} - Telegram to Amazon Bedrock gateway (zero-inbound EC2 host)",
        tags=stack_tags(product),
        env=cdk.Environment(
            account=os.environ.get("CDK_DEFAULT_ACCOUNT"),
            region=os.environ.get("CDK_DEFAULT_REGION", "us-east-1"),
        ),
    )

    app.synth()
    logger.info("Synthesized %s; deploy with --parameters %s=<token>", product.stack_name, TELEGRAM_TOKEN_PARAMETER)


if __name__ == "__main__":
    main()
