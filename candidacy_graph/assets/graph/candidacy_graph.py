"""Candidacy Graph - Rebuild persons and candidate_of edges from applications.

Resets the whole derived graph and repopulates it in one ArangoDB transaction.

Source: record snapshot (records/applications.json + records/users.json)
Target: persons (vertex collection) + candidate_of (edge collection)
"""

from typing import Dict, Any

from dagster import asset, AssetExecutionContext, MetadataValue, Output, Config

from candidacy_graph.config import DATA_DIR
from candidacy_graph.data import RecordRepository
from candidacy_graph.graph import CandidacyGraphStore, rebuild
from candidacy_graph.resources.arango import ArangoDBResource


class CandidacyGraphConfig(Config):
    """Configuration for the candidacy graph rebuild."""
    data_dir: str = DATA_DIR
    batch_size: int = 5000


@asset(
    name="candidacy_graph",
    description="Person vertices and candidate_of edges, rebuilt from the application snapshot.",
    group_name="candidacy",
    compute_kind="graph_edge",
)
def candidacy_graph_asset(
    context: AssetExecutionContext,
    config: CandidacyGraphConfig,
    arango: ArangoDBResource,
) -> Output[Dict[str, Any]]:
    """Rebuild the candidacy graph from the latest record snapshot."""
    
    repo = RecordRepository(config.data_dir)
    if not repo.is_snapshot_fresh():
        context.log.warning(f"⚠️ Application snapshot at {repo.applications_path} is older than a day")
    
    applications, names_by_id = repo.load_rebuild_input()
    context.log.info(f"📋 {len(applications):,} applications, {len(names_by_id):,} named users")
    
    store = CandidacyGraphStore(arango, batch_size=config.batch_size)
    counts = rebuild(store, applications, names_by_id)
    
    context.log.info(f"✅ {counts.node_count:,} persons, {counts.edge_count:,} candidacy edges")
    
    stats = {
        "applications_processed": len(applications),
        **counts.model_dump(by_alias=True),
    }
    return Output(
        value=stats,
        metadata={
            "applications_processed": len(applications),
            "node_count": counts.node_count,
            "edge_count": counts.edge_count,
            "snapshot": MetadataValue.json(repo.load_metadata()),
        }
    )
