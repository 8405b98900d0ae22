"""Unit tests for the filter chain."""

import pytest
import numpy as np

from erythroid_ir.core.filtering import (
    FilterChain,
    FilterConfig,
    FilterSpec,
    build_filter_specs,
    low_tpm_predicate,
)


class TestPredicates:
    """Tests for individual filters through the chain."""

    def test_low_tpm(self, tiny_dataset):
        """Test rows below the TPM threshold are dropped."""
        result = FilterChain.from_config(FilterConfig(), names=["low_tpm"]).apply(tiny_dataset)
        records = result.dataset.records
        assert (records["tpm"] >= 1.0).all()
        assert len(records) == 5
        # boundary value is kept
        assert 1.0 in records["tpm"].tolist()

    def test_perfect_psi(self, tiny_dataset):
        """Test retention rounding to 0 or 1 is dropped."""
        result = FilterChain.from_config(FilterConfig(), names=["perfect_psi"]).apply(tiny_dataset)
        rounded = np.round(result.dataset.records["retention"], 6)
        assert ((rounded > 0) & (rounded < 1)).all()
        assert "i2" not in set(result.dataset.records["intron"])

    def test_perfect_psi_precision(self, tiny_dataset):
        """Test finer precision keeps near-degenerate values."""
        config = FilterConfig(psi_digits=8)
        result = FilterChain.from_config(config, names=["perfect_psi"]).apply(tiny_dataset)
        assert "i2" in set(result.dataset.records["intron"])

    def test_low_frags(self, tiny_dataset):
        """Test rows with too few fragments are dropped."""
        result = FilterChain.from_config(FilterConfig(), names=["low_frags"]).apply(tiny_dataset)
        assert (result.dataset.records["frags"] >= 3).all()
        assert len(result.dataset.records) == 5

    def test_zero_coverage_requires_column(self, tiny_dataset):
        """Test zero-coverage filter needs the enriched column."""
        config = FilterConfig(max_zero_coverage=2)
        chain = FilterChain.from_config(config, names=["zero_coverage"])
        with pytest.raises(KeyError):
            chain.apply(tiny_dataset)

    def test_zero_coverage(self, tiny_dataset):
        """Test rows above the zero-coverage maximum are dropped."""
        records = tiny_dataset.records.assign(zero_coverage=[0, 1, 2, 3, 4, 5])
        dataset = tiny_dataset.with_records(records)
        config = FilterConfig(max_zero_coverage=2)
        result = FilterChain.from_config(config, names=["zero_coverage"]).apply(dataset)
        assert result.dataset.records["zero_coverage"].max() == 2
        assert len(result.dataset.records) == 3


class TestFilterChain:
    """Tests for FilterChain ordering and reports."""

    def test_default_chain(self, tiny_dataset):
        """Test the default chain keeps only fully passing rows."""
        result = FilterChain.from_config().apply(tiny_dataset)
        records = result.dataset.records
        assert sorted(zip(records["intron"], records["sample"])) == [
            ("i1", "pro_2"),
            ("i3", "pro_2"),
        ]

    def test_step_reports(self, tiny_dataset):
        """Test one report row per filter in declared order."""
        result = FilterChain.from_config().apply(tiny_dataset)
        report = result.to_frame()
        assert report["filter"].tolist() == ["low_tpm", "perfect_psi", "low_frags"]
        assert report["rows_before"].tolist() == [6, 5, 3]
        assert report["rows_after"].tolist() == [5, 3, 2]
        assert report["rows_removed"].sum() == 4
        assert report.loc[0, "introns_before"] == 3

    def test_order_matters_for_reports(self, tiny_dataset):
        """Test declared order is the application order."""
        config = FilterConfig(order=["low_frags", "low_tpm"])
        chain = FilterChain.from_config(config)
        assert chain.names == ["low_frags", "low_tpm"]
        result = chain.apply(tiny_dataset)
        assert result.to_frame()["rows_after"].tolist() == [5, 4]

    def test_input_not_modified(self, tiny_dataset):
        """Test the input dataset is left untouched."""
        FilterChain.from_config().apply(tiny_dataset)
        assert tiny_dataset.n_records == 6

    def test_empty_result_propagates(self, tiny_dataset):
        """Test removing every row is valid and later filters still report."""
        config = FilterConfig(min_tpm=100.0)
        result = FilterChain.from_config(config).apply(tiny_dataset)
        assert result.dataset.is_empty
        assert len(result.steps) == 3
        assert result.steps[-1].rows_before == 0

    def test_unknown_filter(self):
        """Test unknown filter names fail at construction."""
        with pytest.raises(ValueError, match="Unknown filter"):
            FilterChain.from_config(FilterConfig(order=["low_tpm", "bogus"]))

    def test_zero_coverage_needs_maximum(self):
        """Test zero-coverage filter without a maximum is rejected."""
        with pytest.raises(ValueError, match="max_zero_coverage"):
            build_filter_specs(FilterConfig(), ["zero_coverage"])

    def test_custom_spec(self, tiny_dataset):
        """Test chains can be built from explicit specs."""
        chain = FilterChain([FilterSpec("strict_tpm", low_tpm_predicate(2.5))])
        result = chain.apply(tiny_dataset)
        assert result.dataset.n_records == 2
        assert result.steps[0].name == "strict_tpm"
