"""Gateway EC2 instance and its launch template."""
from aws_cdk import (
    Fn,
    aws_ec2 as ec2
)

from ..bootstrap import render_bootstrap
from ..graph import ResourceGraph, ResourceKind
from ..settings import GatewayConfig
from ..tags import tag_resource
from .base import logical_ids

FEATURE = "compute"

ROOT_DEVICE_NAME = "/dev/xvda"
ROOT_VOLUME_SIZE_GIB = 8


def metadata_options() -> ec2.CfnLaunchTemplate.MetadataOptionsProperty:
    """IMDSv2 only, reachable from the instance itself and nothing beyond it."""
    return ec2.CfnLaunchTemplate.MetadataOptionsProperty(
        http_endpoint="enabled",
        http_tokens="required",
        http_put_response_hop_limit=1
    )


def apply(graph: ResourceGraph, config: GatewayConfig) -> ResourceGraph:
    product = config.product
    ids = logical_ids(product)

    # IMDSv2 is only configurable on AWS::EC2::Instance through a launch template
    launch_template = ec2.CfnLaunchTemplate(
        graph.scope,
        ids.launch_template,
        launch_template_name=product.resource_name("gateway-lt"),
        launch_template_data=ec2.CfnLaunchTemplate.LaunchTemplateDataProperty(
            metadata_options=metadata_options()
        )
    )

    subnet = graph.get(ids.subnet)
    security_group = graph.get(ids.security_group)
    profile = graph.get(ids.instance_profile)

    instance = ec2.CfnInstance(
        graph.scope,
        ids.instance,
        image_id=ec2.MachineImage.latest_amazon_linux2023().get_image(graph.scope).image_id,
        instance_type=config.instance_size,
        subnet_id=subnet.subnet_id,
        security_group_ids=[security_group.security_group_id],
        iam_instance_profile=profile.instance_profile_name,
        launch_template=ec2.CfnInstance.LaunchTemplateSpecificationProperty(
            launch_template_id=launch_template.ref,
            version=launch_template.attr_latest_version_number
        ),
        user_data=Fn.base64(render_bootstrap(product, config.enable_content_guardrails)),
        block_device_mappings=[
            ec2.CfnInstance.BlockDeviceMappingProperty(
                device_name=ROOT_DEVICE_NAME,
                ebs=ec2.CfnInstance.EbsProperty(
                    volume_size=ROOT_VOLUME_SIZE_GIB,
                    volume_type="gp3",
                    encrypted=True,
                    delete_on_termination=True
                )
            )
        ]
    )
    tag_resource(instance, product.resource_name("gateway"), CostCenter="AI-Assistant")

    # Secrets and parameters must exist before the bootstrap script reads them
    for node in graph.of_kind(ResourceKind.SECRET) + graph.of_kind(ResourceKind.PARAMETER):
        instance.node.add_dependency(node.construct)
    # The bootstrap script downloads packages, so the default route must be in place
    instance.node.add_dependency(subnet.internet_connectivity_established)

    return (
        graph.add(ResourceKind.LAUNCH_TEMPLATE, launch_template, feature=FEATURE)
        .add(ResourceKind.COMPUTE, instance, feature=FEATURE)
    )
