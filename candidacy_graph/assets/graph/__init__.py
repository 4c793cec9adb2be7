"""Graph Assets - Build and read the candidacy graph.

Vertex Collections:
- persons: One per user seen on either end of an application

Edge Collections:
- candidate_of: person → person (candidate applied toward target), with priority

All assets read and write the database named by ARANGO_DB.
"""

from candidacy_graph.assets.graph.candidacy_graph import candidacy_graph_asset
from candidacy_graph.assets.graph.interlocking_chains import interlocking_chains_asset
from candidacy_graph.assets.graph.candidacy_summary import candidacy_summary_asset

__all__ = [
    "candidacy_graph_asset",
    "interlocking_chains_asset",
    "candidacy_summary_asset",
]
