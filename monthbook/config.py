"""Configuration file management for monthbook."""

import logging
import os
import tomllib
from pathlib import Path
from typing import Any

import tomli_w

from monthbook.domain.errors import InvalidRuleConfig
from monthbook.domain.virtual import (
    DEFAULT_TITHE_NAME,
    DEFAULT_TOTAL_INCOME_NAME,
    SplitBucket,
    SplitRule,
    TitheRule,
    TotalIncomeRule,
    VirtualRules,
    parse_ratio,
    validate_rules,
)
from monthbook.engine import DEFAULT_MAX_LOOKBACK_MONTHS

logger = logging.getLogger(__name__)


def get_xdg_config_home() -> Path:
    """Get XDG config directory, with fallback to ~/.config."""
    xdg_config = os.environ.get("XDG_CONFIG_HOME")
    if xdg_config:
        return Path(xdg_config)
    return Path.home() / ".config"


def get_config_path() -> Path:
    """Get the config file path (XDG compliant).

    Returns:
        Path to the config file.
    """
    return get_xdg_config_home() / "monthbook" / "config.toml"


def default_config() -> dict[str, Any]:
    """Return the configuration written by `monthbook init`."""
    return {
        "budget": {
            "max_lookback_months": DEFAULT_MAX_LOOKBACK_MONTHS,
        },
        "virtual": {
            "total_income_name": DEFAULT_TOTAL_INCOME_NAME,
            "tithe_name": DEFAULT_TITHE_NAME,
            "tithe_percent": "10",
            "splits": [],
        },
    }


def create_default_config(config_path: Path | None = None) -> None:
    """Create default config file with secure permissions.

    Args:
        config_path: Path to config file. If None, uses default location.
    """
    save_config(default_config(), config_path)


def load_config(config_path: Path | None = None) -> dict[str, Any]:
    """Load configuration from TOML file.

    A missing file yields the defaults.

    Args:
        config_path: Path to config file. If None, uses default location.

    Returns:
        Configuration dictionary.

    Raises:
        InvalidRuleConfig: If the file is not valid TOML.
    """
    if config_path is None:
        config_path = get_config_path()

    if not config_path.exists():
        logger.debug("No config at %s, using defaults", config_path)
        return default_config()

    with open(config_path, "rb") as f:
        try:
            return tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            raise InvalidRuleConfig(f"Could not parse {config_path}: {e}") from e


def save_config(config: dict[str, Any], config_path: Path | None = None) -> None:
    """Save configuration to TOML file.

    Args:
        config: Configuration dictionary.
        config_path: Path to config file. If None, uses default location.
    """
    if config_path is None:
        config_path = get_config_path()

    config_path.parent.mkdir(parents=True, exist_ok=True)

    with open(config_path, "wb") as f:
        tomli_w.dump(config, f)

    os.chmod(config_path, 0o600)


def get_max_lookback(config: dict[str, Any]) -> int:
    """Read the rollover lookback bound.

    Raises:
        InvalidRuleConfig: If the value is not a positive integer.
    """
    value = config.get("budget", {}).get("max_lookback_months", DEFAULT_MAX_LOOKBACK_MONTHS)
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise InvalidRuleConfig(f"budget.max_lookback_months must be a positive integer, got {value!r}")
    return value


def _parse_split(raw: Any) -> SplitRule:
    if not isinstance(raw, dict):
        raise InvalidRuleConfig(f"Each virtual.splits entry must be a table, got {raw!r}")

    source = raw.get("source")
    buckets = raw.get("buckets")
    if not isinstance(source, str):
        raise InvalidRuleConfig("Split rule is missing its 'source' category name")
    if not isinstance(buckets, list):
        raise InvalidRuleConfig(f"Split rule for '{source}' needs a 'buckets' list")

    parsed = []
    for bucket in buckets:
        if not isinstance(bucket, dict) or not isinstance(bucket.get("name"), str) or "ratio" not in bucket:
            raise InvalidRuleConfig(f"Split rule for '{source}' has a bucket without name and ratio")
        parsed.append(SplitBucket(name=bucket["name"], ratio=parse_ratio(bucket["ratio"])))

    return SplitRule(source=source, buckets=tuple(parsed))


def load_virtual_rules(config: dict[str, Any]) -> VirtualRules:
    """Build and validate the virtual category rule table.

    Validation runs here, once, rather than on every month view.

    Args:
        config: Configuration dictionary.

    Returns:
        Validated VirtualRules.

    Raises:
        InvalidRuleConfig: If any rule is malformed.
    """
    section = config.get("virtual", {})
    if not isinstance(section, dict):
        raise InvalidRuleConfig("[virtual] must be a table")

    splits = section.get("splits", [])
    if not isinstance(splits, list):
        raise InvalidRuleConfig("virtual.splits must be an array of tables")

    total_income_name = section.get("total_income_name", DEFAULT_TOTAL_INCOME_NAME)
    tithe_name = section.get("tithe_name", DEFAULT_TITHE_NAME)
    for key, value in (("total_income_name", total_income_name), ("tithe_name", tithe_name)):
        if not isinstance(value, str):
            raise InvalidRuleConfig(f"virtual.{key} must be a string, got {value!r}")

    rules = VirtualRules(
        total_income=TotalIncomeRule(name=total_income_name),
        tithe=TitheRule(
            name=tithe_name,
            percent=parse_ratio(section.get("tithe_percent", "10")),
        ),
        splits=tuple(_parse_split(raw) for raw in splits),
    )
    return validate_rules(rules)
