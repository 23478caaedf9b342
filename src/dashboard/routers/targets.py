"""Target records API -- list targets, engage teams, change status."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, Request
from pydantic import BaseModel

router = APIRouter(prefix="/api/targets", tags=["targets"])


class TeamRequest(BaseModel):
    team: str


class StatusRequest(BaseModel):
    status: str


def _get_registry(request: Request):
    registry = getattr(request.app.state, "target_registry", None)
    if registry is None:
        raise HTTPException(503, "Target registry not available")
    return registry


@router.get("/")
async def list_targets(request: Request, status: str | None = None):
    """All targets, optionally filtered by status."""
    registry = _get_registry(request)
    targets = registry.get_targets()
    if status is not None:
        targets = [t for t in targets if t.status.value.lower() == status.lower()]
    return [t.to_dict() for t in targets]


@router.get("/teams")
async def available_teams(request: Request):
    """Strike teams free to deploy."""
    registry = _get_registry(request)
    return {"available": registry.available_teams()}


@router.post("/{target_id}/team")
async def assign_team(target_id: str, body: TeamRequest, request: Request):
    """Engage a strike team (Alpha, Bravo or Charlie) on a target.

    400 when the team cannot deploy to this target.
    """
    registry = _get_registry(request)
    try:
        target = registry.assign_team(target_id, body.team)
    except KeyError:
        raise HTTPException(404, f"Target '{target_id}' not found")
    except ValueError as e:
        raise HTTPException(400, str(e))
    return target.to_dict()


@router.post("/{target_id}/status")
async def set_status(target_id: str, body: StatusRequest, request: Request):
    registry = _get_registry(request)
    try:
        target = registry.set_status(target_id, body.status)
    except KeyError:
        raise HTTPException(404, f"Target '{target_id}' not found")
    except ValueError as e:
        raise HTTPException(400, str(e))
    return target.to_dict()
