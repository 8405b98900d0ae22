"""Pytest configuration and shared fixtures for erythroid-ir tests."""

import sys
from pathlib import Path

import pytest
import pandas as pd

# Add package to path
PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from erythroid_ir.core.retention import RetentionDataset

# Import mock data generators
from tests.fixtures import (
    create_coverage_summary,
    create_intron_genes,
    create_mock_retention,
    create_sample_table,
    create_test_results,
)


# ============================================================================
# Mock Data Fixtures
# ============================================================================


@pytest.fixture
def retention_records() -> pd.DataFrame:
    """10 introns x 5 conditions x 3 samples, all passing default filters."""
    return create_mock_retention()


@pytest.fixture
def intron_genes() -> pd.DataFrame:
    return create_intron_genes()


@pytest.fixture
def retention_dataset(retention_records, intron_genes) -> RetentionDataset:
    """RetentionDataset built from the mock records."""
    return RetentionDataset(
        records=retention_records,
        samples=create_sample_table(),
        intron_genes=intron_genes,
    )


@pytest.fixture
def coverage_summary(retention_records) -> pd.DataFrame:
    return create_coverage_summary(retention_records)


@pytest.fixture
def test_results(retention_records) -> pd.DataFrame:
    """Tester output for every pair except intron_03 in poly."""
    return create_test_results(
        retention_records, keep_fraction=1.0, drop=[("intron_03", "poly")]
    )


@pytest.fixture
def partial_test_results(retention_records) -> pd.DataFrame:
    """Tester output for about half of the (intron, condition) pairs."""
    return create_test_results(retention_records)


@pytest.fixture
def tiny_records() -> pd.DataFrame:
    """Hand-written records covering each filter's boundary."""
    return pd.DataFrame({
        "intron": ["i1", "i1", "i2", "i2", "i3", "i3"],
        "sample": ["pro_1", "pro_2", "pro_1", "pro_2", "pro_1", "pro_2"],
        "condition": ["pro"] * 6,
        "tpm": [0.5, 1.0, 3.0, 3.0, 2.0, 2.0],
        "retention": [0.2, 0.3, 0.0000001, 0.9999999, 0.4, 0.5],
        "frags": [10, 10, 10, 10, 2, 3],
        "unique_counts": [10, 10, 10, 10, 2, 3],
    })


@pytest.fixture
def tiny_dataset(tiny_records) -> RetentionDataset:
    return RetentionDataset(records=tiny_records, samples=None, intron_genes=None)


@pytest.fixture
def tmp_output_dir(tmp_path: Path) -> Path:
    """Create a temporary output directory for tests."""
    output_dir = tmp_path / "output"
    output_dir.mkdir(parents=True, exist_ok=True)
    return output_dir


# ============================================================================
# File Fixtures
# ============================================================================


@pytest.fixture
def input_tables(tmp_path, retention_records, intron_genes, coverage_summary, test_results):
    """Mock inputs written to disk, as the CLI consumes them."""
    paths = {
        "retention": tmp_path / "retention.tsv",
        "samples": tmp_path / "samples.csv",
        "introns": tmp_path / "introns.tsv",
        "coverage": tmp_path / "zero_coverage.tsv",
        "tests": tmp_path / "ir_test.tsv",
    }
    retention_records.to_csv(paths["retention"], sep="\t", index=False)
    create_sample_table().to_csv(paths["samples"], index=False)
    intron_genes.to_csv(paths["introns"], sep="\t", index=False)
    coverage_summary.to_csv(paths["coverage"], sep="\t", index=False)
    test_results.to_csv(paths["tests"], sep="\t", index=False)
    return paths


@pytest.fixture
def sample_analysis_config(tmp_path) -> Path:
    """Analysis configuration file with a few overridden settings."""
    import yaml

    config = {
        "analysis": {
            "filters": {
                "min_tpm": 2.0,
                "min_frags": 4,
            },
            "clustering": {
                "n_clusters": 3,
                "random_seed": 7,
            },
            "distribution": {
                "n_points": 101,
            },
        },
    }

    path = tmp_path / "analysis.yaml"
    with open(path, "w") as f:
        yaml.dump(config, f)

    return path
