"""Tests for monthbook.config."""

import stat
from fractions import Fraction
from pathlib import Path

import pytest

from monthbook.config import (
    create_default_config,
    default_config,
    get_config_path,
    get_max_lookback,
    load_config,
    load_virtual_rules,
)
from monthbook.domain.errors import InvalidRuleConfig
from monthbook.domain.virtual import SplitBucket


class TestConfigFile:
    """Tests for reading and writing the TOML file."""

    def test_path_follows_xdg(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path))

        assert get_config_path() == tmp_path / "monthbook" / "config.toml"

    def test_missing_file_gives_defaults(self, tmp_path: Path) -> None:
        assert load_config(tmp_path / "missing.toml") == default_config()

    def test_default_round_trip(self, tmp_path: Path) -> None:
        """Should write a readable file with owner-only permissions."""
        path = tmp_path / "monthbook" / "config.toml"

        create_default_config(path)

        assert load_config(path) == default_config()
        assert stat.S_IMODE(path.stat().st_mode) == 0o600

    def test_invalid_toml(self, tmp_path: Path) -> None:
        path = tmp_path / "config.toml"
        path.write_text("[budget\n")

        with pytest.raises(InvalidRuleConfig, match="Could not parse"):
            load_config(path)


class TestMaxLookback:
    """Tests for get_max_lookback."""

    def test_default(self) -> None:
        assert get_max_lookback({}) == 24

    def test_configured(self) -> None:
        assert get_max_lookback({"budget": {"max_lookback_months": 6}}) == 6

    @pytest.mark.parametrize("value", [0, -3, "12", True])
    def test_invalid(self, value: object) -> None:
        with pytest.raises(InvalidRuleConfig):
            get_max_lookback({"budget": {"max_lookback_months": value}})


class TestLoadVirtualRules:
    """Tests for load_virtual_rules."""

    def test_defaults(self) -> None:
        rules = load_virtual_rules(default_config())

        assert rules.total_income.name == "Total Income"
        assert rules.tithe.name == "Tithe"
        assert rules.tithe.percent == Fraction(10)
        assert rules.splits == ()

    def test_custom_names_and_percent(self) -> None:
        rules = load_virtual_rules(
            {"virtual": {"total_income_name": "Income", "tithe_name": "Giving", "tithe_percent": "12.5"}}
        )

        assert (rules.total_income.name, rules.tithe.name) == ("Income", "Giving")
        assert rules.tithe.percent == Fraction(25, 2)

    def test_split_rule(self, tmp_path: Path) -> None:
        """Should parse [[virtual.splits]] tables from the file."""
        path = tmp_path / "config.toml"
        path.write_text(
            """
[[virtual.splits]]
source = "Car Insurance"
buckets = [
    { name = "Auto A", ratio = "0.5" },
    { name = "Auto B", ratio = "0.5" },
]
"""
        )

        rules = load_virtual_rules(load_config(path))

        [split] = rules.splits
        assert split.source == "Car Insurance"
        assert split.source_id is None
        assert split.buckets == (SplitBucket("Auto A", Fraction(1, 2)), SplitBucket("Auto B", Fraction(1, 2)))

    def test_float_ratio_is_rejected(self) -> None:
        """Should refuse TOML floats so ratios stay exact."""
        config = {"virtual": {"splits": [{"source": "Rent", "buckets": [{"name": "All", "ratio": 1.0}]}]}}

        with pytest.raises(InvalidRuleConfig):
            load_virtual_rules(config)

    def test_ratios_must_sum_to_one(self) -> None:
        config = {
            "virtual": {
                "splits": [
                    {"source": "Rent", "buckets": [{"name": "A", "ratio": "0.5"}, {"name": "B", "ratio": "0.4"}]}
                ]
            }
        }

        with pytest.raises(InvalidRuleConfig, match="sum to"):
            load_virtual_rules(config)

    @pytest.mark.parametrize(
        "split",
        [
            "Rent",
            {"buckets": []},
            {"source": "Rent"},
            {"source": "Rent", "buckets": [{"ratio": "1"}]},
        ],
    )
    def test_malformed_split(self, split: object) -> None:
        with pytest.raises(InvalidRuleConfig):
            load_virtual_rules({"virtual": {"splits": [split]}})

    def test_tithe_percent_over_hundred(self) -> None:
        with pytest.raises(InvalidRuleConfig):
            load_virtual_rules({"virtual": {"tithe_percent": 150}})

    @pytest.mark.parametrize("key", ["total_income_name", "tithe_name"])
    def test_non_string_row_name(self, key: str) -> None:
        """Should report a numeric row name as a config error."""
        with pytest.raises(InvalidRuleConfig, match=key):
            load_virtual_rules({"virtual": {key: 42}})

    def test_blank_row_name(self) -> None:
        with pytest.raises(InvalidRuleConfig):
            load_virtual_rules({"virtual": {"tithe_name": "  "}})
