"""Domain models and types for fingestor.

This package contains the functional core:
- Pure functions with no side effects
- No I/O operations
- Easy to test
- Business logic separated from infrastructure
"""

from fingestor.domain.models import CategoryName, Description, Money, Month

__all__ = ["Money", "Month", "CategoryName", "Description"]
