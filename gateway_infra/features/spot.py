"""
Run the gateway on a persistent spot request that stops on interruption.

Market options can only be set in the launch template data, so this feature
reassigns the compute feature's launch template data with the same metadata
options plus the spot request.
"""
from aws_cdk import aws_ec2 as ec2

from ..graph import ResourceGraph
from ..settings import GatewayConfig
from . import compute
from .base import logical_ids

FEATURE = "spot"


def market_options(config: GatewayConfig) -> ec2.CfnLaunchTemplate.InstanceMarketOptionsProperty:
    return ec2.CfnLaunchTemplate.InstanceMarketOptionsProperty(
        market_type="spot",
        spot_options=ec2.CfnLaunchTemplate.SpotOptionsProperty(
            spot_instance_type="persistent",
            instance_interruption_behavior="stop",
            max_price=str(config.spot_max_hourly_price)
        )
    )


def apply(graph: ResourceGraph, config: GatewayConfig) -> ResourceGraph:
    if not config.use_spot_pricing:
        return graph

    launch_template = graph.get(logical_ids(config.product).launch_template)
    launch_template.launch_template_data = ec2.CfnLaunchTemplate.LaunchTemplateDataProperty(
        metadata_options=compute.metadata_options(),
        instance_market_options=market_options(config)
    )
    return graph
