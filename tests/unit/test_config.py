"""Unit tests for configuration classes."""

import pytest
import pandas as pd
import yaml

from erythroid_ir.config import ERYTHROID_STAGES, ConditionOrder
from erythroid_ir.core.clustering import ClusteringConfig
from erythroid_ir.core.distribution import DistributionConfig
from erythroid_ir.core.filtering import DEFAULT_FILTER_ORDER, FilterConfig
from erythroid_ir.pipeline import AnalysisConfig, OutputConfig


class TestConditionOrder:
    """Tests for the shared condition ordering."""

    def test_default_stages(self):
        """Test default ordering is the erythroid maturation series."""
        order = ConditionOrder()
        assert tuple(order) == ("pro", "ebaso", "lbaso", "poly", "ortho")
        assert len(order) == 5
        assert "poly" in order

    def test_position(self):
        """Test ordinal positions."""
        order = ConditionOrder()
        assert order.position("pro") == 0
        assert order.position("ortho") == 4

    def test_position_unknown(self):
        """Test unknown label raises ValueError."""
        with pytest.raises(ValueError, match="Unknown condition"):
            ConditionOrder().position("retic")

    def test_sort(self):
        """Test sorting labels by stage."""
        assert ConditionOrder().sort(["ortho", "pro", "poly"]) == ["pro", "poly", "ortho"]

    def test_validate_unknown(self):
        """Test validate rejects labels outside the ordering."""
        with pytest.raises(ValueError):
            ConditionOrder().validate(["pro", "retic"])

    def test_categorical_is_ordered(self):
        """Test categorical conversion keeps stage order."""
        cat = ConditionOrder().categorical(["poly", "pro"])
        assert cat.ordered
        assert list(cat.categories) == list(ERYTHROID_STAGES)
        assert list(cat.codes) == [3, 0]

    def test_duplicates_rejected(self):
        """Test duplicate conditions are rejected."""
        with pytest.raises(ValueError, match="Duplicate"):
            ConditionOrder(("pro", "pro"))

    def test_empty_rejected(self):
        """Test empty ordering is rejected."""
        with pytest.raises(ValueError):
            ConditionOrder(())

    def test_from_value(self):
        """Test building from list and mapping."""
        assert tuple(ConditionOrder.from_value(["a", "b"])) == ("a", "b")
        assert tuple(ConditionOrder.from_value({"order": ["x"]})) == ("x",)
        order = ConditionOrder()
        assert ConditionOrder.from_value(order) is order

    def test_from_yaml(self, tmp_path):
        """Test loading ordering from YAML."""
        path = tmp_path / "conditions.yaml"
        path.write_text("conditions: [early, late]\n")
        assert tuple(ConditionOrder.from_yaml(path)) == ("early", "late")

    def test_dtype(self):
        """Test pandas dtype."""
        s = pd.Series(["ebaso", "pro"], dtype=ConditionOrder().dtype)
        assert list(s.sort_values()) == ["pro", "ebaso"]


class TestFilterConfig:
    """Tests for FilterConfig dataclass."""

    def test_default_values(self):
        """Test default thresholds."""
        config = FilterConfig()
        assert config.order == DEFAULT_FILTER_ORDER
        assert config.min_tpm == 1.0
        assert config.psi_digits == 6
        assert config.min_frags == 3
        assert config.max_zero_coverage is None
        assert config.post_coverage_order == []

    def test_from_yaml(self, tmp_path):
        """Test loading from YAML with a filters section."""
        path = tmp_path / "filters.yaml"
        path.write_text("filters:\n  min_tpm: 2.5\n  order: [low_frags]\n")
        config = FilterConfig.from_yaml(path)
        assert config.min_tpm == 2.5
        assert config.order == ["low_frags"]

    def test_round_trip(self):
        """Test to_dict/from_dict round trip."""
        config = FilterConfig(min_frags=5, max_zero_coverage=2.0)
        assert FilterConfig.from_dict(config.to_dict()) == config


class TestClusteringConfig:
    """Tests for ClusteringConfig dataclass."""

    def test_default_values(self):
        """Test default clustering settings."""
        config = ClusteringConfig()
        assert config.n_clusters == 9
        assert config.random_seed == 42
        assert config.max_iter == 100
        assert config.n_init == 25
        assert config.expected_sizes is None

    def test_expected_sizes_length(self):
        """Test declared sizes must match the cluster count."""
        with pytest.raises(ValueError, match="expected_sizes"):
            ClusteringConfig(n_clusters=3, expected_sizes=[1, 2])

    def test_invalid_n_clusters(self):
        """Test non-positive cluster count is rejected."""
        with pytest.raises(ValueError):
            ClusteringConfig(n_clusters=0)

    def test_from_yaml(self, tmp_path):
        """Test loading from YAML."""
        path = tmp_path / "clustering.yaml"
        path.write_text("clustering:\n  n_clusters: 4\n  random_seed: 1\n")
        config = ClusteringConfig.from_yaml(path)
        assert config.n_clusters == 4
        assert config.random_seed == 1


class TestDistributionConfig:
    """Tests for DistributionConfig dataclass."""

    def test_default_values(self):
        """Test default grid and figure range."""
        config = DistributionConfig()
        assert config.n_points == 1000
        assert config.figure_upper == 0.5
        assert config.n_workers == 1

    def test_invalid_points(self):
        """Test grid needs at least two points."""
        with pytest.raises(ValueError):
            DistributionConfig(n_points=1)


class TestAnalysisConfig:
    """Tests for AnalysisConfig."""

    def test_default(self):
        """Test default configuration."""
        config = AnalysisConfig.default()
        assert tuple(config.conditions) == ERYTHROID_STAGES
        assert config.filters.min_tpm == 1.0
        assert config.clustering.n_clusters == 9
        assert config.distribution.n_points == 1000
        assert config.output.no_filter_summary == "no_filter_summary.tsv"
        assert config.coverage_columns == ["zero_coverage"]

    def test_from_yaml_with_root(self, sample_analysis_config):
        """Test loading YAML with an analysis root key."""
        config = AnalysisConfig.from_yaml(sample_analysis_config)
        assert config.filters.min_tpm == 2.0
        assert config.filters.min_frags == 4
        assert config.filters.psi_digits == 6
        assert config.clustering.n_clusters == 3
        assert config.distribution.n_points == 101

    def test_from_yaml_without_root(self, tmp_path):
        """Test loading YAML without the analysis root key."""
        path = tmp_path / "flat.yaml"
        path.write_text("conditions: [a, b, c]\nqvalue_threshold: 0.05\n")
        config = AnalysisConfig.from_yaml(path)
        assert tuple(config.conditions) == ("a", "b", "c")
        assert config.qvalue_threshold == 0.05

    def test_from_yaml_missing(self, tmp_path):
        """Test missing config file raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            AnalysisConfig.from_yaml(tmp_path / "missing.yaml")

    def test_unknown_key(self):
        """Test unknown top-level settings are rejected."""
        with pytest.raises(ValueError, match="Unknown analysis settings"):
            AnalysisConfig.from_dict({"clusterin": {}})

    def test_unknown_output_key(self):
        """Test unknown output settings are rejected."""
        with pytest.raises(ValueError):
            OutputConfig.from_dict({"summary": "x.tsv"})

    def test_round_trip(self):
        """Test to_dict/from_dict round trip."""
        config = AnalysisConfig.default()
        config.clustering.random_seed = 3
        config.filters.max_zero_coverage = 5.0
        restored = AnalysisConfig.from_dict(config.to_dict())
        assert restored.to_dict() == config.to_dict()

    def test_to_yaml(self):
        """Test YAML dump has the analysis root."""
        data = yaml.safe_load(AnalysisConfig.default().to_yaml())
        assert "analysis" in data
        assert data["analysis"]["conditions"] == list(ERYTHROID_STAGES)
