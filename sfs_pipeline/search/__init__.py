"""Versioned full-text search over statute provisions."""

from sfs_pipeline.search.fts_query import FtsQueryVariants, build_fts_query_variants
from sfs_pipeline.search.versioned_search import ProvisionSearchService, SearchHit

__all__ = [
    "FtsQueryVariants",
    "ProvisionSearchService",
    "SearchHit",
    "build_fts_query_variants",
]
