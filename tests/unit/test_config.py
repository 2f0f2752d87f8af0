"""Unit tests for configuration resolution."""
import pytest

from gateway_infra.exceptions import ConfigurationError
from gateway_infra.products import PRODUCTS, ProductIdentity
from gateway_infra.settings import CONFIG_DIR, PARAMETER_NAMES, GatewayConfig, load_parameter_file, resolve_config

VALID_TOKEN = "1234567890:ABCdefGHIjklMNOpqrSTUvwxYZ0123456789"


def resolve(**overrides):
    raw = {"telegramToken": VALID_TOKEN}
    raw.update(overrides)
    return resolve_config(raw)


class TestDefaults:
    """Test values used when options are omitted."""

    def test_defaults(self):
        """Test that only the token is needed."""
        config = resolve()

        assert config.product is PRODUCTS["openclaw"]
        assert config.ai_model == "anthropic.claude-sonnet-4-5-v2"
        assert config.instance_size == "t3.micro"
        assert config.monthly_budget_limit == 50
        assert config.enable_content_guardrails is False
        assert config.budget_alert_email == ""
        assert config.schedule_enabled is False
        assert config.shutdown_hour == 22
        assert config.startup_hour == 8
        assert config.weekend_shutdown_enabled is False
        assert config.use_spot_pricing is False
        assert config.spot_max_hourly_price == 0.005

    def test_product_selection(self):
        """Test that the product key selects the identity."""
        config = resolve(product="moltbot")

        assert config.product.name == "Moltbot"
        assert config.product.slug == "moltbot"

    def test_unknown_keys_are_ignored(self):
        """Test that unrelated context keys do not fail validation."""
        config = resolve(**{"aws:cdk:enable-path-metadata": True, "stage": "beta"})

        assert config.product.slug == "openclaw"


class TestCoercion:
    """Test that CDK context strings are coerced to declared types."""

    def test_bool_strings(self):
        """Test true/false strings."""
        config = resolve(enableContentGuardrails="true", useSpotPricing="False")

        assert config.enable_content_guardrails is True
        assert config.use_spot_pricing is False

    def test_numeric_strings(self):
        """Test numbers supplied as strings."""
        config = resolve(monthlyBudgetLimit="25", shutdownHour="20", spotMaxHourlyPrice="0.004")

        assert config.monthly_budget_limit == 25
        assert config.shutdown_hour == 20
        assert config.spot_max_hourly_price == 0.004

    def test_invalid_bool(self):
        """Test that anything other than true/false is rejected."""
        with pytest.raises(ConfigurationError) as exc_info:
            resolve(scheduleEnabled="yes")

        assert exc_info.value.violations == ["scheduleEnabled: must be true or false (got 'yes')"]

    def test_fractional_hour(self):
        """Test that hours must be whole numbers."""
        with pytest.raises(ConfigurationError) as exc_info:
            resolve(shutdownHour=21.5)

        assert exc_info.value.violations[0].startswith("shutdownHour: must be a whole number")

    @pytest.mark.parametrize("option,message", [
        ("product", "must be one of"),
        ("aiModel", "must be one of"),
        ("instanceSize", "must be one of"),
        ("monthlyBudgetLimit", "must be a number"),
        ("shutdownHour", "must be a number"),
        ("spotMaxHourlyPrice", "must be a number"),
        ("enableContentGuardrails", "must be true or false"),
        ("useSpotPricing", "must be true or false"),
    ])
    def test_empty_string_is_rejected(self, option, message):
        """Test that an empty value is an error rather than the default."""
        with pytest.raises(ConfigurationError) as exc_info:
            resolve(**{option: ""})

        (violation,) = exc_info.value.violations
        assert violation.startswith(f"{option}: {message}")
        assert violation.endswith("(got '')")

    def test_empty_email_means_no_alerts(self):
        """Test that the email is the one option where empty is a valid value."""
        assert resolve(budgetAlertEmail="").budget_alert_email == ""


class TestConstraints:
    """Test option constraints."""

    @pytest.mark.parametrize("limit", [10, 500, 250.5])
    def test_budget_within_bounds(self, limit):
        """Test that budget limits on and inside the bounds pass."""
        assert resolve(monthlyBudgetLimit=limit).monthly_budget_limit == limit

    @pytest.mark.parametrize("limit", [9, 501, 0, -10])
    def test_budget_out_of_bounds(self, limit):
        """Test that budget limits outside [10, 500] fail."""
        with pytest.raises(ConfigurationError) as exc_info:
            resolve(monthlyBudgetLimit=limit)

        assert exc_info.value.violations == [f"monthlyBudgetLimit: must be between 10 and 500 (got {limit})"]

    @pytest.mark.parametrize("option", ["shutdownHour", "startupHour"])
    @pytest.mark.parametrize("hour", [-1, 24])
    def test_hour_out_of_range(self, option, hour):
        """Test that hours outside 0-23 fail."""
        with pytest.raises(ConfigurationError) as exc_info:
            resolve(**{option: hour})

        assert exc_info.value.violations[0].startswith(f"{option}: must be between 0 and 23")

    def test_unknown_model(self):
        """Test that models outside the allowed list fail."""
        with pytest.raises(ConfigurationError) as exc_info:
            resolve(aiModel="anthropic.claude-v2")

        assert exc_info.value.violations[0].startswith("aiModel: must be one of")

    def test_unknown_instance_size(self):
        """Test that instance sizes outside the allowed list fail."""
        with pytest.raises(ConfigurationError):
            resolve(instanceSize="m5.large")

    def test_unknown_product(self):
        """Test that only the three gateway products are accepted."""
        with pytest.raises(ConfigurationError):
            resolve(product="otherbot")

    @pytest.mark.parametrize("price", [0, -0.001])
    def test_spot_price_must_be_positive(self, price):
        """Test that the spot price is strictly positive."""
        with pytest.raises(ConfigurationError) as exc_info:
            resolve(spotMaxHourlyPrice=price)

        assert exc_info.value.violations[0].startswith("spotMaxHourlyPrice: must be greater than 0")

    def test_budget_email(self):
        """Test email validation."""
        assert resolve(budgetAlertEmail="ops@example.com").budget_alert_email == "ops@example.com"

        with pytest.raises(ConfigurationError) as exc_info:
            resolve(budgetAlertEmail="not-an-email")

        assert exc_info.value.violations[0].startswith("budgetAlertEmail: must be a valid email address")

    def test_schedule_hours_must_differ(self):
        """Test that an empty power schedule is rejected only when scheduling is on."""
        with pytest.raises(ConfigurationError) as exc_info:
            resolve(scheduleEnabled=True, shutdownHour=8, startupHour=8)

        assert exc_info.value.violations == [
            "startupHour: must differ from shutdownHour when scheduleEnabled is true"
        ]
        assert resolve(scheduleEnabled=False, shutdownHour=8, startupHour=8).startup_hour == 8

    def test_violations_are_aggregated(self):
        """Test that every violation is reported at once."""
        with pytest.raises(ConfigurationError) as exc_info:
            resolve_config({"monthlyBudgetLimit": 9, "instanceSize": "t2.nano", "shutdownHour": 30})

        names = [violation.split(":")[0] for violation in exc_info.value.violations]
        assert names == ["telegramToken", "instanceSize", "monthlyBudgetLimit", "shutdownHour"]
        assert str(exc_info.value).startswith("4 configuration error(s): ")


class TestTelegramToken:
    """Test handling of the secret token."""

    @pytest.mark.parametrize("token", [None, ""])
    def test_token_required(self, token):
        """Test that a missing token fails."""
        with pytest.raises(ConfigurationError) as exc_info:
            resolve(telegramToken=token)

        assert exc_info.value.violations == ["telegramToken: is required"]

    def test_malformed_token_is_not_echoed(self):
        """Test that the rejected value never appears in the error."""
        bad_token = "12345:tooshort"
        with pytest.raises(ConfigurationError) as exc_info:
            resolve(telegramToken=bad_token)

        assert bad_token not in str(exc_info.value)
        assert exc_info.value.violations[0].startswith("telegramToken: must be a valid Telegram bot token")

    def test_token_hidden_from_repr(self):
        """Test that the config repr omits the token."""
        config = resolve()

        assert config.telegram_token == VALID_TOKEN
        assert VALID_TOKEN not in repr(config)


class TestParameterFiles:
    """Test the per-product parameter files."""

    @pytest.mark.parametrize("product", sorted(PRODUCTS))
    def test_parameter_file_is_valid(self, product):
        """Test that each shipped parameter file resolves with a token."""
        raw = load_parameter_file(product)
        raw["telegramToken"] = VALID_TOKEN

        assert (CONFIG_DIR / f"{product}.json").exists()
        assert set(raw) <= set(PARAMETER_NAMES)
        assert "telegramToken" not in load_parameter_file(product)
        assert resolve_config(raw).product.slug == product

    def test_unknown_product_file(self):
        """Test that unknown products load nothing."""
        assert load_parameter_file("otherbot") == {}


class TestGatewayConfig:
    """Test constructing the configuration directly."""

    def test_direct_construction(self):
        """Test that a config built in code is checked like resolved input."""
        config = GatewayConfig(product=PRODUCTS["clawdbot"], telegram_token=VALID_TOKEN, schedule_enabled=True)

        assert config.product is PRODUCTS["clawdbot"]
        assert config.schedule_enabled is True
        assert config == resolve(product="clawdbot", scheduleEnabled=True)

    def test_product_slug_and_string_values_are_coerced(self):
        """Test that slugs and context-style strings become typed values."""
        config = GatewayConfig(
            product="moltbot",
            telegram_token=VALID_TOKEN,
            monthly_budget_limit="75",
            use_spot_pricing="true",
            startup_hour="6",
        )

        assert config.product is PRODUCTS["moltbot"]
        assert config.monthly_budget_limit == 75
        assert config.use_spot_pricing is True
        assert config.startup_hour == 6

    def test_invalid_values_are_rejected(self):
        """Test that bypassing resolve_config does not bypass validation."""
        with pytest.raises(ConfigurationError) as exc_info:
            GatewayConfig(
                product=PRODUCTS["openclaw"],
                telegram_token="not-a-token",
                instance_size="m5.large",
                monthly_budget_limit=5000,
                shutdown_hour=99,
            )

        names = [violation.split(":")[0] for violation in exc_info.value.violations]
        assert names == ["telegramToken", "instanceSize", "monthlyBudgetLimit", "shutdownHour"]
        assert "not-a-token" not in str(exc_info.value)

    def test_unregistered_product_identity(self):
        """Test that only the registered products are accepted."""
        impostor = ProductIdentity(name="Otherbot", slug="otherbot", npm_package="otherbot")

        with pytest.raises(ConfigurationError) as exc_info:
            GatewayConfig(product=impostor, telegram_token=VALID_TOKEN)

        assert exc_info.value.violations[0].startswith("product: must be one of")

    def test_schedule_hours_checked(self):
        """Test the cross-field rule on direct construction."""
        with pytest.raises(ConfigurationError) as exc_info:
            GatewayConfig(
                product=PRODUCTS["openclaw"],
                telegram_token=VALID_TOKEN,
                schedule_enabled=True,
                shutdown_hour=7,
                startup_hour=7,
            )

        assert exc_info.value.violations == [
            "startupHour: must differ from shutdownHour when scheduleEnabled is true"
        ]

    def test_schedule_rule_skipped_when_hours_invalid(self):
        """Test that a bad hour is reported once, without the cross-field error."""
        with pytest.raises(ConfigurationError) as exc_info:
            resolve(scheduleEnabled=True, shutdownHour=30, startupHour=30)

        names = [violation.split(":")[0] for violation in exc_info.value.violations]
        assert names == ["shutdownHour", "startupHour"]

    def test_frozen(self):
        """Test that a validated config cannot be changed afterwards."""
        config = resolve()

        with pytest.raises(AttributeError):
            config.instance_size = "m5.large"
