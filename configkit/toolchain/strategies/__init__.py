"""
Toolkit acquisition strategies, in the order the chain tries them.
"""

from .local import CachedTreeStrategy, ExplicitPathStrategy, SystemLocatorStrategy
from .remote import PrebuiltPackageStrategy, SourceArchiveStrategy

__all__ = [
    "CachedTreeStrategy",
    "ExplicitPathStrategy",
    "SystemLocatorStrategy",
    "PrebuiltPackageStrategy",
    "SourceArchiveStrategy",
]
