"""
Cluster routes — per-anchor aggregate confidence.
"""
from typing import List

from fastapi import APIRouter, Depends, HTTPException

from api.schemas import ClusterOut, cluster_out
from api.state import get_snapshot
from pipeline.orchestrator import Snapshot

router = APIRouter()


@router.get("/", response_model=List[ClusterOut])
def list_clusters(snapshot: Snapshot = Depends(get_snapshot)):
    """List every anchor cluster in the latest snapshot."""
    return [cluster_out(aid, c) for aid, c in sorted(snapshot.clusters.items())]


@router.get("/{anchor_id}", response_model=ClusterOut)
def get_cluster(anchor_id: str, snapshot: Snapshot = Depends(get_snapshot)):
    """Get one anchor's cluster."""
    cluster = snapshot.clusters.get(anchor_id)
    if cluster is None:
        raise HTTPException(status_code=404, detail=f"Cluster '{anchor_id}' not found")
    return cluster_out(anchor_id, cluster)
