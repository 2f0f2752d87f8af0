"""Single-AZ public network with a zero-inbound security group."""
from aws_cdk import aws_ec2 as ec2

from ..graph import ResourceGraph, ResourceKind
from ..settings import GatewayConfig
from ..tags import tag_resource
from .base import logical_ids

FEATURE = "network"

VPC_CIDR = "10.0.0.0/16"
SUBNET_CIDR_MASK = 24
HTTPS_PORT = 443


def apply(graph: ResourceGraph, config: GatewayConfig) -> ResourceGraph:
    product = config.product
    ids = logical_ids(product)

    # No NAT gateway: the instance sits in the public subnet behind the IGW
    vpc = ec2.Vpc(
        graph.scope,
        ids.vpc,
        vpc_name=product.resource_name("vpc"),
        ip_addresses=ec2.IpAddresses.cidr(VPC_CIDR),
        max_azs=1,
        nat_gateways=0,
        subnet_configuration=[
            ec2.SubnetConfiguration(
                name="Public",
                subnet_type=ec2.SubnetType.PUBLIC,
                cidr_mask=SUBNET_CIDR_MASK
            )
        ],
        enable_dns_hostnames=True,
        enable_dns_support=True,
        restrict_default_security_group=False
    )

    security_group = ec2.SecurityGroup(
        graph.scope,
        ids.security_group,
        vpc=vpc,
        security_group_name=product.resource_name("gateway-sg"),
        description=f"{product.name} Gateway - Zero inbound traffic (polling model)",
        allow_all_outbound=False
    )
    security_group.add_egress_rule(
        ec2.Peer.any_ipv4(),
        ec2.Port.tcp(HTTPS_PORT),
        "HTTPS outbound for Telegram API, Bedrock, SSM, CloudWatch"
    )
    tag_resource(security_group, product.resource_name("gateway-sg"), SecurityPosture="Zero-Inbound")

    return (
        graph.add(ResourceKind.NETWORK, vpc, feature=FEATURE)
        .add(ResourceKind.SUBNET, vpc.public_subnets[0], logical_id=ids.subnet, feature=FEATURE)
        .add(ResourceKind.FIREWALL, security_group, feature=FEATURE)
    )
