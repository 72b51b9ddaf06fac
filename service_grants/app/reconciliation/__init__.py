"""
Reconciliation package.

- engine: the decision table and the store/membership apply sequence
- pipeline: ordered request stages ending in a single terminal outcome
"""

from .engine import ReconciliationEngine, decide
from .pipeline import GrantPipeline

__all__ = ["GrantPipeline", "ReconciliationEngine", "decide"]
