"""Core computational modules for erythroid-ir.

This package contains the analysis stages, in pipeline order:
- retention: Retention dataset model and table-backed builder
- filtering: Row filter chain (TPM, perfect PSI, fragment support, coverage)
- coverage: Zero-coverage enrichment
- testing: Significance-tester interface and precomputed-result adapter
- reconcile: Test-result reconciliation and the no-filter summary table
- clustering: Complete-case retention matrix and k-means clustering
- distribution: Per-stage empirical retention distributions
"""
