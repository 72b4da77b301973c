"""
Core logic package.

Provides request capture, body decoding, authentication and response assembly.
Only the dependency-free header multimap is re-exported here; the models
package imports it.
"""

from .headers import HeaderMultiMap, emit_pairs

__all__ = [
    "HeaderMultiMap",
    "emit_pairs",
]
