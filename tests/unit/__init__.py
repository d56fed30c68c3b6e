"""
Unit tests for monkeyrouter core modules.

This package contains unit tests for:
- analyzer: Tech stack, code indicator and context analyzers
- strategy: ResponseStrategySelector selection and adjustments
- tokens: TokenEstimator heuristics and TokenCounter
- router: AdvancedRouter tier selection and history adjustments
- catalog: ModelDescriptor and ModelCatalog
- calibration: RouterCalibrator threshold search
- config: MonkeyRouterConfig loading
- errors: Exception hierarchy
"""
