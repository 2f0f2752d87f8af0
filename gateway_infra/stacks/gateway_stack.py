from aws_cdk import (
    Stack,
    CfnOutput
)
from constructs import Construct

from ..composer import compose
from ..graph import ResourceGraph
from ..settings import GatewayConfig


class GatewayStack(Stack):
    """Single gateway deployment: every resource the composed feature set needs."""

    def __init__(self, scope: Construct, construct_id: str, config: GatewayConfig, **kwargs) -> None:
        super().__init__(scope, construct_id, **kwargs)

        self.config = config
        self.product = config.product

        # Compose the resources in this stack
        self.graph: ResourceGraph = compose(self, config)

        # Create outputs
        self._create_outputs()

    def _create_outputs(self):
        """Create stack outputs."""
        for output in self.graph.outputs:
            CfnOutput(
                self,
                output.key,
                value=output.value,
                description=output.description,
                export_name=output.export_name
            )
