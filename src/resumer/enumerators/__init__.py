"""Resumable iterator construction.

Provides:
- EnumeratorBuilder: build_* methods for the supported source shapes
- NestedIterator: multi-level composition with a per-level cursor list
- PagedSource: protocol for keyset-paged collections
- SqlKeysetSource / InMemoryPagedSource: PagedSource implementations
"""

from resumer.enumerators.builder import DEFAULT_BATCH_SIZE, EnumeratorBuilder
from resumer.enumerators.nested import NestedIterator
from resumer.enumerators.paged import InMemoryPagedSource, PagedSource, SqlKeysetSource

__all__ = [
    "DEFAULT_BATCH_SIZE",
    "EnumeratorBuilder",
    "InMemoryPagedSource",
    "NestedIterator",
    "PagedSource",
    "SqlKeysetSource",
]
