# disruption_engine/api/routes_snapshots.py
"""
Snapshot API routes.

Snapshots are write-once captures used by the replay timeline.
"""

from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel

from ..errors import EngineError
from ..service import DisruptionService, get_service
from .errors import http_error

router = APIRouter(prefix="/snapshots", tags=["snapshots"])


class SaveSnapshotRequest(BaseModel):
    label: Optional[str] = None


@router.get("")
def list_snapshots(
    limit: int = Query(default=100, ge=1, le=1000),
    service: DisruptionService = Depends(get_service),
) -> Dict[str, Any]:
    """Snapshot summaries, newest first."""
    try:
        snapshots = service.list_snapshots(limit)
    except EngineError as e:
        raise http_error(e)
    return {"snapshots": snapshots, "count": len(snapshots)}


@router.post("")
def save_snapshot(
    request: Optional[SaveSnapshotRequest] = None,
    service: DisruptionService = Depends(get_service),
) -> Dict[str, Any]:
    label = request.label if request else None
    try:
        return {"success": True, "snapshot": service.save_snapshot(label)}
    except EngineError as e:
        raise http_error(e)


@router.get("/{snapshot_id}")
def load_snapshot(
    snapshot_id: int,
    service: DisruptionService = Depends(get_service),
) -> Dict[str, Any]:
    """Full snapshot including flights and booking states."""
    try:
        return service.load_snapshot(snapshot_id)
    except EngineError as e:
        raise http_error(e)


@router.post("/{snapshot_id}/restore")
def restore_snapshot(
    snapshot_id: int,
    service: DisruptionService = Depends(get_service),
) -> Dict[str, Any]:
    try:
        outcome = service.restore_snapshot(snapshot_id)
    except EngineError as e:
        raise http_error(e)
    return outcome.to_dict()
