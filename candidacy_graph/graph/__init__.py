"""Candidacy graph core: store adapter, builder, cycle finder and summaries.

Control flow:
  application records → builder.rebuild → store (one transaction)
                                        → chains.find_chains (read)
                                        → summary.list_edges / summary.counts (read)
"""

from candidacy_graph.graph.builder import merge_applications, rebuild, validate_applications
from candidacy_graph.graph.chains import chains_from_edges, find_chains
from candidacy_graph.graph.store import CandidacyGraphStore
from candidacy_graph.graph.summary import counts, list_edges

__all__ = [
    "CandidacyGraphStore",
    "merge_applications",
    "rebuild",
    "validate_applications",
    "chains_from_edges",
    "find_chains",
    "counts",
    "list_edges",
]
