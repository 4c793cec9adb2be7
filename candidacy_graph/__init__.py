"""Candidacy Graph - who applied to work with whom, and the loops that form.

This package contains the Dagster definitions for rebuilding a derived graph
of candidacies in ArangoDB and reading interlocking chains out of it.

Architecture:
- models/ → Pydantic vertices, edges, input records and projections
- resources/ → ArangoDB connection resource
- graph/ → Store adapter, builder, cycle finder, summary projector
- service.py → Tagged-result operations for any transport on top
- data/ → Local snapshot of the application record store
- assets/ → Dagster assets wrapping the graph operations
- jobs/ → One job to rebuild and refresh everything

Data Flow:
  record store snapshot → candidacy_graph (rebuild) → interlocking_chains
                                                    → candidacy_summary
"""

from dagster import Definitions
from candidacy_graph.assets import (
    candidacy_graph_asset,
    interlocking_chains_asset,
    candidacy_summary_asset,
)
from candidacy_graph.jobs import candidacy_graph_job
from candidacy_graph.resources import arango_resource

# ============================================================================
# DEFINITIONS
# ============================================================================

defs = Definitions(
    assets=[
        candidacy_graph_asset,
        interlocking_chains_asset,
        candidacy_summary_asset,
    ],
    resources={
        "arango": arango_resource,
    },
    jobs=[
        candidacy_graph_job,
    ],
)
