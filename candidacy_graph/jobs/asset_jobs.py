"""Asset materialization jobs for the candidacy graph.

Philosophy:
- Individual assets can be materialized directly in the UI
- One job rebuilds the graph and refreshes every read-side asset

All assets are accessible directly in the UI for ad-hoc materialization.
"""

from dagster import define_asset_job, AssetSelection

# ============================================================================
# MAIN JOB
# ============================================================================

candidacy_graph_job = define_asset_job(
    name="candidacy_graph_job",
    description="Rebuild the candidacy graph, then find interlocking chains and refresh the summary",
    selection=AssetSelection.keys(
        "candidacy_graph",          # reset + repopulate (one transaction)
        "interlocking_chains",      # cycles of 2..10 people
        "candidacy_summary",        # edge list + counts
    ),
    tags={
        "pipeline": "candidacy-graph",
    },
)
