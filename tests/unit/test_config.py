"""Tests for configuration models and YAML loading."""

from pathlib import Path
from textwrap import dedent

import pytest
from pydantic import ValidationError

from careerboard.core.config import (
    DatabaseConfig,
    ReportConfig,
    ScoringConfig,
    Settings,
    TierConfig,
)


class TestScoringConfig:
    def test_defaults(self) -> None:
        s = ScoringConfig()
        assert s.click_weight == 3.0
        assert s.save_weight == 2.0
        assert s.view_weight == 0.1
        assert s.rate_weight == 2.0
        assert s.daily_weight == 5.0

    def test_negative_weight_rejected(self) -> None:
        with pytest.raises(ValidationError):
            ScoringConfig(click_weight=-1.0)


class TestTierConfig:
    def test_defaults(self) -> None:
        t = TierConfig()
        assert t.high_threshold == 15.0
        assert t.medium_threshold == 5.0

    def test_medium_above_high_raises(self) -> None:
        with pytest.raises(ValidationError, match="medium_threshold must not exceed"):
            TierConfig(high_threshold=5.0, medium_threshold=10.0)


class TestReportConfig:
    def test_defaults(self) -> None:
        r = ReportConfig()
        assert r.days == 30
        assert r.top_n == 5
        assert r.metric == "score"

    def test_days_bounds(self) -> None:
        with pytest.raises(ValidationError):
            ReportConfig(days=0)
        with pytest.raises(ValidationError):
            ReportConfig(days=366)

    def test_unknown_metric(self) -> None:
        with pytest.raises(ValidationError):
            ReportConfig(metric="views")  # type: ignore[arg-type]


class TestDatabaseConfig:
    def test_default_path(self) -> None:
        assert DatabaseConfig().path == "data/careerboard.db"


class TestSettings:
    def test_load_from_yaml(self, tmp_path: Path) -> None:
        yaml_content = dedent("""\
            database:
              path: data/test.db
            scoring:
              click_weight: 4
            tiers:
              high_threshold: 20
            report:
              days: 7
              top_n: 10
              metric: saves
        """)
        config_file = tmp_path / "settings.yaml"
        config_file.write_text(yaml_content)

        settings = Settings.from_yaml(config_file)

        assert settings.database.path == "data/test.db"
        assert settings.scoring.click_weight == 4.0
        assert settings.scoring.view_weight == 0.1
        assert settings.tiers.high_threshold == 20.0
        assert settings.report.days == 7
        assert settings.report.metric == "saves"

    def test_empty_file_uses_defaults(self, tmp_path: Path) -> None:
        config_file = tmp_path / "settings.yaml"
        config_file.write_text("")
        settings = Settings.from_yaml(config_file)
        assert settings.report.top_n == 5

    def test_file_not_found(self) -> None:
        with pytest.raises(FileNotFoundError):
            Settings.from_yaml("/nonexistent/path.yaml")

    def test_invalid_value_raises(self, tmp_path: Path) -> None:
        config_file = tmp_path / "settings.yaml"
        config_file.write_text("report:\n  top_n: 0\n")
        with pytest.raises(ValidationError):
            Settings.from_yaml(config_file)

    def test_load_example_settings(self) -> None:
        """The shipped config/settings.yaml must be valid."""
        settings = Settings.from_yaml(Path(__file__).parents[2] / "config" / "settings.yaml")
        assert settings.scoring == ScoringConfig()
        assert settings.report.days == 30
