"""Interlocking Chains - Closed loops of candidacies in the current graph.

Source: persons + candidate_of
Output: chains of 2..max_length people, ranked by length
"""

from collections import Counter
from typing import Dict, Any

from dagster import asset, AssetExecutionContext, MetadataValue, Output, Config

from candidacy_graph.config import MAX_CHAIN_LENGTH
from candidacy_graph.graph import CandidacyGraphStore, find_chains
from candidacy_graph.resources.arango import ArangoDBResource


class InterlockingChainsConfig(Config):
    max_length: int = MAX_CHAIN_LENGTH


@asset(
    name="interlocking_chains",
    description="Simple candidacy cycles of 2..10 people with their average priority.",
    group_name="candidacy",
    compute_kind="graph_query",
    deps=["candidacy_graph"],
)
def interlocking_chains_asset(
    context: AssetExecutionContext,
    config: InterlockingChainsConfig,
    arango: ArangoDBResource,
) -> Output[Dict[str, Any]]:
    """Find every interlocking chain up to `max_length` people."""
    
    store = CandidacyGraphStore(arango)
    chains = find_chains(store, config.max_length)
    
    by_length = Counter(chain.length for chain in chains)
    for length in sorted(by_length):
        context.log.info(f"  🔗 length {length}: {by_length[length]:,} chains")
    context.log.info(f"🎉 {len(chains):,} chains up to length {config.max_length}")
    
    return Output(
        value={"chains": [chain.model_dump(by_alias=True) for chain in chains]},
        metadata={
            "chain_count": len(chains),
            "by_length": MetadataValue.json({str(k): v for k, v in sorted(by_length.items())}),
            "preview": MetadataValue.json([chain.model_dump(by_alias=True) for chain in chains[:10]]),
        }
    )
