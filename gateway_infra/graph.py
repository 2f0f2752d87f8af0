"""
Registry of the constructs composed into a gateway stack.

Features create ``aws_cdk`` constructs in the graph's scope and register them
here by logical id and kind. The registry is immutable: every operation
returns a new graph. A feature can only look up what earlier features
registered, so references between resources always point backwards.

IAM statements for a role are collected with ``grant`` and attached as one
policy after the whole pipeline has run, so a later feature extends the
permission set without touching the policy an earlier one produced.
"""
import dataclasses
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Tuple

from aws_cdk import aws_iam as iam
from constructs import Construct

from .exceptions import ConstraintViolation


class ResourceKind(str, Enum):
    NETWORK = "network"
    SUBNET = "subnet"
    FIREWALL = "firewall"
    IDENTITY = "identity"
    INSTANCE_PROFILE = "instance_profile"
    POLICY = "policy"
    SECRET = "secret"
    PARAMETER = "parameter"
    CONTENT_FILTER = "content_filter"
    LAUNCH_TEMPLATE = "launch_template"
    COMPUTE = "compute"
    ALARM = "alarm"
    LOG_SINK = "log_sink"
    BUDGET = "budget"
    SCHEDULE = "schedule"
    AUTOMATION = "automation"


@dataclass(frozen=True)
class ResourceNode:
    """
    One registered construct.

    Attributes:
        logical_id: Registry key; the construct id unless given explicitly
        kind: Role of the resource in the gateway topology
        construct: The CDK construct
        feature: Name of the feature that created it
    """
    logical_id: str
    kind: ResourceKind
    construct: Construct
    feature: str = "base"


@dataclass(frozen=True)
class Output:
    """Named value derived from the finished graph."""
    key: str
    value: str
    description: str
    export_name: Optional[str] = None


@dataclass(frozen=True)
class ResourceGraph:
    """Immutable, ordered registry of constructs, pending grants and outputs."""
    scope: Construct
    nodes: Tuple[ResourceNode, ...] = ()
    grants: Tuple[Tuple[str, iam.PolicyStatement], ...] = ()
    outputs: Tuple[Output, ...] = ()

    def __contains__(self, logical_id: object) -> bool:
        return any(node.logical_id == logical_id for node in self.nodes)

    def __len__(self) -> int:
        return len(self.nodes)

    def node(self, logical_id: str) -> ResourceNode:
        for node in self.nodes:
            if node.logical_id == logical_id:
                return node
        raise ConstraintViolation(f"Resource {logical_id} is not part of the graph")

    def get(self, logical_id: str):
        """Construct registered under ``logical_id``."""
        return self.node(logical_id).construct

    def of_kind(self, kind: ResourceKind) -> Tuple[ResourceNode, ...]:
        return tuple(node for node in self.nodes if node.kind == kind)

    def from_feature(self, feature: str) -> Tuple[ResourceNode, ...]:
        return tuple(node for node in self.nodes if node.feature == feature)

    def add(
        self,
        kind: ResourceKind,
        construct: Construct,
        logical_id: Optional[str] = None,
        feature: str = "base",
    ) -> "ResourceGraph":
        """Register a construct created in this graph's scope."""
        logical_id = logical_id or construct.node.id
        if logical_id in self:
            raise ConstraintViolation(f"Duplicate logical id {logical_id}")
        node = ResourceNode(logical_id, kind, construct, feature)
        return dataclasses.replace(self, nodes=self.nodes + (node,))

    def grant(self, role_id: str, statement: iam.PolicyStatement) -> "ResourceGraph":
        """Add a statement to the pending policy of a registered role."""
        if not isinstance(self.get(role_id), iam.Role):
            raise ConstraintViolation(f"{role_id} is not an IAM role")

        sid = statement.sid
        if sid and sid in {existing.sid for existing in self.statements(role_id)}:
            raise ConstraintViolation(f"Statement {sid} is already granted to {role_id}")

        return dataclasses.replace(self, grants=self.grants + ((role_id, statement),))

    def statements(self, role_id: str) -> List[iam.PolicyStatement]:
        """Statements granted to a role, in grant order."""
        return [statement for granted_to, statement in self.grants if granted_to == role_id]

    def with_output(self, output: Output) -> "ResourceGraph":
        if output.key in {existing.key for existing in self.outputs}:
            raise ConstraintViolation(f"Duplicate output {output.key}")
        return dataclasses.replace(self, outputs=self.outputs + (output,))
