"""Monthly cost budget scoped to the product's Application tag."""
from typing import List

from aws_cdk import aws_budgets as budgets

from ..graph import ResourceGraph, ResourceKind
from ..settings import GatewayConfig
from .base import logical_ids

FEATURE = "budget"

ACTUAL_ALERT_PERCENT = 80
FORECAST_ALERT_PERCENT = 100


def notifications(email: str) -> List[budgets.CfnBudget.NotificationWithSubscribersProperty]:
    """Budget notifications; empty when no alert address was supplied."""
    if not email:
        return []

    return [
        budgets.CfnBudget.NotificationWithSubscribersProperty(
            notification=budgets.CfnBudget.NotificationProperty(
                notification_type=notification_type,
                comparison_operator="GREATER_THAN",
                threshold=threshold,
                threshold_type="PERCENTAGE"
            ),
            subscribers=[budgets.CfnBudget.SubscriberProperty(subscription_type="EMAIL", address=email)]
        )
        for notification_type, threshold in (
            ("ACTUAL", ACTUAL_ALERT_PERCENT),
            ("FORECASTED", FORECAST_ALERT_PERCENT),
        )
    ]


def apply(graph: ResourceGraph, config: GatewayConfig) -> ResourceGraph:
    product = config.product
    ids = logical_ids(product)

    budget = budgets.CfnBudget(
        graph.scope,
        ids.budget,
        budget=budgets.CfnBudget.BudgetDataProperty(
            budget_name=f"{product.name}-Monthly-Budget",
            budget_limit=budgets.CfnBudget.SpendProperty(amount=config.monthly_budget_limit, unit="USD"),
            time_unit="MONTHLY",
            budget_type="COST",
            cost_filters={"TagKeyValue": [product.cost_tag]}
        ),
        notifications_with_subscribers=notifications(config.budget_alert_email) or None
    )

    return graph.add(ResourceKind.BUDGET, budget, feature=FEATURE)
