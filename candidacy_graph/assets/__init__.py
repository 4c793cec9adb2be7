"""Dagster assets for the candidacy graph."""

from candidacy_graph.assets.graph import (
    candidacy_graph_asset,
    interlocking_chains_asset,
    candidacy_summary_asset,
)

__all__ = [
    "candidacy_graph_asset",
    "interlocking_chains_asset",
    "candidacy_summary_asset",
]
