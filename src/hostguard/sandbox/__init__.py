"""
Executor backends.
"""

from hostguard.sandbox._base import Executor
from hostguard.sandbox.local import TRUNCATION_MARKER, LocalExecutor, truncate_output

__all__ = [
    "Executor",
    "LocalExecutor",
    "TRUNCATION_MARKER",
    "truncate_output",
]
