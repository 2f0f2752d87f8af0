"""
Monthly EC2 cost estimate for the gateway host.

Pure arithmetic over the resolved schedule and pricing mode. The estimate is
only reported as a stack output and never influences which resources exist.
"""
from dataclasses import dataclass
from typing import Dict

from .settings import GatewayConfig

HOURS_PER_MONTH = 730
DAYS_PER_MONTH = 30
WEEKDAYS_PER_MONTH = 22
WEEKENDS_PER_MONTH = 4
WEEKEND_SHUTDOWN_HOURS = 48

# us-east-1 Linux on-demand rates, USD/hour
ON_DEMAND_HOURLY_RATES: Dict[str, float] = {
    "t3.micro": 0.0104,
    "t3.small": 0.0208,
    "t3.medium": 0.0416,
}


@dataclass(frozen=True)
class CostEstimate:
    active_hours: int
    hourly_rate: float
    pricing: str

    @property
    def monthly_cost(self) -> float:
        return self.active_hours * self.hourly_rate

    def describe(self) -> str:
        return (
            f"${self.monthly_cost:.2f}/month (EC2 {self.pricing}, "
            f"{self.active_hours} active hours at ${self.hourly_rate}/hour)"
        )


def nightly_window_hours(shutdown_hour: int, startup_hour: int) -> int:
    """Hours between the nightly stop and the next start."""
    return (startup_hour - shutdown_hour) % 24


def shutdown_window_hours(
    schedule_enabled: bool,
    shutdown_hour: int,
    startup_hour: int,
    weekend_shutdown_enabled: bool,
) -> int:
    """Hours per month the instance is scheduled to be stopped."""
    if not schedule_enabled:
        return 0

    nightly = nightly_window_hours(shutdown_hour, startup_hour)
    if weekend_shutdown_enabled:
        return nightly * WEEKDAYS_PER_MONTH + WEEKEND_SHUTDOWN_HOURS * WEEKENDS_PER_MONTH
    return nightly * DAYS_PER_MONTH


def estimate_monthly_cost(config: GatewayConfig) -> CostEstimate:
    """Estimate the monthly compute cost for a configuration."""
    stopped = shutdown_window_hours(
        config.schedule_enabled,
        config.shutdown_hour,
        config.startup_hour,
        config.weekend_shutdown_enabled,
    )
    active_hours = max(HOURS_PER_MONTH - stopped, 0)

    if config.use_spot_pricing:
        return CostEstimate(active_hours, config.spot_max_hourly_price, "spot")
    return CostEstimate(active_hours, ON_DEMAND_HOURLY_RATES[config.instance_size], "on-demand")
