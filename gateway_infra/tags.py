"""
Tag helpers for gateway resources.

Provides consistent tagging for cost allocation and resource management.
"""
from typing import Dict

from aws_cdk import Tags
from constructs import IConstruct

from .products import ProductIdentity

DEFAULT_TAGS: Dict[str, str] = {
    "ManagedBy": "CDK",
    "CostCenter": "AI-Assistant",
}


def stack_tags(product: ProductIdentity) -> Dict[str, str]:
    """Stack-level tags, applied to every taggable resource in the stack."""
    return {
        "Project": product.name,
        "Application": product.name,
        "Environment": "Production",
        **DEFAULT_TAGS,
    }


def tag_resource(construct: IConstruct, resource_name: str, **extra_tags: str) -> None:
    """
    Tag a construct and its children.

    Args:
        construct: Construct to tag
        resource_name: Value of the Name tag
        **extra_tags: Additional tags, overriding the stack-level ones
    """
    Tags.of(construct).add("Name", resource_name)
    for key, value in extra_tags.items():
        Tags.of(construct).add(key, value)
