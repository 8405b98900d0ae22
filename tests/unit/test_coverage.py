"""Unit tests for zero-coverage enrichment."""

import pytest
import pandas as pd

from erythroid_ir.core.coverage import CoverageEnricher, load_coverage_summary
from erythroid_ir.exceptions import MergeError, RetentionAnalysisError


class TestCoverageEnricher:
    """Tests for CoverageEnricher."""

    def test_attaches_columns(self, retention_dataset, coverage_summary):
        """Test coverage columns are attached without removing rows."""
        enriched = CoverageEnricher().enrich(retention_dataset, coverage_summary)
        assert enriched.n_records == retention_dataset.n_records
        assert "zero_coverage" in enriched.records.columns
        assert enriched.records["zero_coverage"].notna().all()

    def test_values_follow_keys(self, retention_dataset, coverage_summary):
        """Test values are joined by (intron, sample), not by position."""
        shuffled = coverage_summary.sample(frac=1.0, random_state=0)
        enriched = CoverageEnricher().enrich(retention_dataset, shuffled)
        merged = enriched.records.merge(
            coverage_summary, on=["intron", "sample"], suffixes=("", "_expected")
        )
        assert (merged["zero_coverage"] == merged["zero_coverage_expected"]).all()

    def test_input_not_modified(self, retention_dataset, coverage_summary):
        """Test the input dataset keeps its columns."""
        CoverageEnricher().enrich(retention_dataset, coverage_summary)
        assert "zero_coverage" not in retention_dataset.records.columns

    def test_extra_coverage_rows_ignored(self, retention_dataset, coverage_summary):
        """Test coverage rows without a record are ignored."""
        extra = pd.DataFrame({"intron": ["other"], "sample": ["pro_1"], "zero_coverage": [3]})
        coverage = pd.concat([coverage_summary, extra], ignore_index=True)
        enriched = CoverageEnricher().enrich(retention_dataset, coverage)
        assert enriched.n_records == retention_dataset.n_records

    def test_unmatched_record(self, retention_dataset, coverage_summary):
        """Test records without coverage raise MergeError."""
        with pytest.raises(MergeError, match="no coverage entry"):
            CoverageEnricher().enrich(retention_dataset, coverage_summary.iloc[1:])

    def test_duplicate_keys(self, retention_dataset, coverage_summary):
        """Test duplicate coverage keys raise MergeError."""
        coverage = pd.concat([coverage_summary, coverage_summary.head(2)])
        with pytest.raises(MergeError, match="duplicate"):
            CoverageEnricher().enrich(retention_dataset, coverage)

    def test_missing_value_column(self, retention_dataset, coverage_summary):
        """Test requested coverage columns must exist."""
        enricher = CoverageEnricher(value_columns=["zero_fraction"])
        with pytest.raises(MergeError, match="missing columns"):
            enricher.enrich(retention_dataset, coverage_summary)

    def test_clashing_column(self, retention_dataset, coverage_summary):
        """Test coverage columns may not overwrite record columns."""
        coverage = coverage_summary.assign(tpm=1.0)
        with pytest.raises(MergeError, match="clash"):
            CoverageEnricher().enrich(retention_dataset, coverage)

    def test_re_enrich_replaces(self, retention_dataset, coverage_summary):
        """Test enriching twice replaces the earlier values."""
        enricher = CoverageEnricher()
        once = enricher.enrich(retention_dataset, coverage_summary)
        twice = enricher.enrich(once, coverage_summary.assign(zero_coverage=0))
        assert (twice.records["zero_coverage"] == 0).all()
        assert list(twice.records.columns).count("zero_coverage") == 1

    def test_merge_error_hierarchy(self):
        """Test MergeError derives from the package error."""
        assert issubclass(MergeError, RetentionAnalysisError)


class TestLoadCoverageSummary:
    """Tests for reading coverage tables."""

    def test_load(self, input_tables):
        """Test loading a TSV coverage summary."""
        coverage = load_coverage_summary(input_tables["coverage"])
        assert list(coverage.columns) == ["intron", "sample", "zero_coverage"]

    def test_missing_column(self, tmp_path):
        """Test missing coverage column raises ValueError."""
        path = tmp_path / "zc.csv"
        pd.DataFrame({"intron": ["i1"], "sample": ["s1"]}).to_csv(path, index=False)
        with pytest.raises(ValueError):
            load_coverage_summary(path)

    def test_missing_file(self, tmp_path):
        """Test missing file raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            load_coverage_summary(tmp_path / "missing.tsv")
