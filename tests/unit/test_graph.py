"""Unit tests for the construct registry."""
import pytest
from aws_cdk import App, Stack, aws_iam as iam, aws_ssm as ssm

from gateway_infra.exceptions import ConstraintViolation
from gateway_infra.graph import Output, ResourceGraph, ResourceKind


@pytest.fixture
def stack():
    return Stack(App(), "GraphStack")


@pytest.fixture
def graph(stack):
    role = iam.Role(stack, "Role", assumed_by=iam.ServicePrincipal("ec2.amazonaws.com"))
    parameter = ssm.StringParameter(stack, "Parameter", string_value="value")
    return (
        ResourceGraph(stack)
        .add(ResourceKind.IDENTITY, role)
        .add(ResourceKind.PARAMETER, parameter, feature="secrets")
    )


def read_statement(sid="ReadParameters"):
    return iam.PolicyStatement(sid=sid, actions=["ssm:GetParameter"], resources=["*"])


class TestRegistry:
    """Test registering and looking up constructs."""

    def test_add_is_immutable(self, stack):
        """Test that adding returns a new graph."""
        empty = ResourceGraph(stack)
        role = iam.Role(stack, "Role", assumed_by=iam.ServicePrincipal("ec2.amazonaws.com"))

        graph = empty.add(ResourceKind.IDENTITY, role)

        assert len(empty) == 0
        assert len(graph) == 1
        assert "Role" in graph
        assert "Role" not in empty

    def test_logical_id_defaults_to_construct_id(self, graph):
        """Test that constructs are keyed by their id unless named explicitly."""
        assert [node.logical_id for node in graph.nodes] == ["Role", "Parameter"]

    def test_explicit_logical_id(self, stack, graph):
        """Test registering a construct under another key."""
        other = ssm.StringParameter(stack, "Other", string_value="value")

        graph = graph.add(ResourceKind.PARAMETER, other, logical_id="Alias")

        assert graph.get("Alias") is other
        assert "Other" not in graph

    def test_duplicate_logical_id(self, stack, graph):
        """Test that a key is registered once."""
        other = ssm.StringParameter(stack, "Other", string_value="value")

        with pytest.raises(ConstraintViolation, match="Duplicate logical id Parameter"):
            graph.add(ResourceKind.PARAMETER, other, logical_id="Parameter")

    def test_queries(self, graph):
        """Test lookup by kind and feature."""
        assert [node.logical_id for node in graph.of_kind(ResourceKind.PARAMETER)] == ["Parameter"]
        assert [node.logical_id for node in graph.from_feature("secrets")] == ["Parameter"]
        assert graph.of_kind(ResourceKind.COMPUTE) == ()
        assert graph.node("Role").kind is ResourceKind.IDENTITY

        with pytest.raises(ConstraintViolation, match="Missing is not part of the graph"):
            graph.get("Missing")


class TestGrant:
    """Test IAM statement grants."""

    def test_grant_appends_statement(self, graph):
        """Test that grants are collected per role in order."""
        granted = graph.grant("Role", read_statement("First")).grant("Role", read_statement("Second"))

        assert [statement.sid for statement in granted.statements("Role")] == ["First", "Second"]
        assert graph.statements("Role") == []

    def test_duplicate_sid(self, graph):
        """Test that a statement is granted only once."""
        graph = graph.grant("Role", read_statement())

        with pytest.raises(ConstraintViolation, match="already granted"):
            graph.grant("Role", read_statement())

    def test_grant_to_non_role(self, graph):
        """Test that only IAM roles receive statements."""
        with pytest.raises(ConstraintViolation, match="not an IAM role"):
            graph.grant("Parameter", read_statement())

    def test_grant_to_missing_role(self, graph):
        """Test that the role must be registered first."""
        with pytest.raises(ConstraintViolation, match="not part of the graph"):
            graph.grant("Missing", read_statement())


class TestOutputs:
    """Test derived outputs."""

    def test_outputs_in_order(self, graph):
        """Test that outputs keep their insertion order."""
        graph = graph.with_output(Output("A", "a", "first")).with_output(Output("B", "b", "second"))

        assert [output.key for output in graph.outputs] == ["A", "B"]

    def test_duplicate_output(self, graph):
        """Test that output keys are unique."""
        graph = graph.with_output(Output("Notes", "text", "notes"))

        with pytest.raises(ConstraintViolation, match="Duplicate output"):
            graph.with_output(Output("Notes", "other", "notes"))
