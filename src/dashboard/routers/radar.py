"""Radar API -- simulation control, pointer events, frames and alerts.

Endpoints:
    GET  /api/radar/state              -- engine state (mode, rivals, hazards)
    GET  /api/radar/rivals             -- active rival agents
    POST /api/radar/mode               -- set the view layer mode
    POST /api/radar/start              -- start the rival tick driver
    POST /api/radar/stop               -- stop it (rivals freeze in place)
    POST /api/radar/jam/{rival_id}     -- jam one rival
    POST /api/radar/click              -- resolve a click (jam / select)
    POST /api/radar/hover              -- resolve a hover (tooltip only)
    POST /api/radar/resize             -- change the drawing surface
    GET  /api/radar/frame.jpg          -- latest rendered frame as JPEG
    GET  /api/radar/mjpeg              -- MJPEG stream of rendered frames
    GET  /api/radar/notifications      -- recent notifications
"""

from __future__ import annotations

import time
from typing import Generator

import cv2
from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import Response, StreamingResponse
from pydantic import BaseModel

from radar.render.hit_test import hit_to_dict

router = APIRouter(prefix="/api/radar", tags=["radar"])

JPEG_QUALITY = 80


class ModeRequest(BaseModel):
    mode: str


class PointerEvent(BaseModel):
    x: float
    y: float


class ResizeRequest(BaseModel):
    width: int
    height: int


def _get_engine(request: Request):
    """Retrieve the RadarEngine from app state."""
    engine = getattr(request.app.state, "radar_engine", None)
    if engine is None:
        raise HTTPException(503, "Radar engine not available")
    return engine


def _encode_jpeg(image, quality: int = JPEG_QUALITY) -> bytes:
    ok, buf = cv2.imencode(".jpg", image, [cv2.IMWRITE_JPEG_QUALITY, quality])
    if not ok:
        raise HTTPException(500, "Frame encoding failed")
    return buf.tobytes()


def _current_image(engine):
    """Latest rendered image, or a read-only preview before the first frame."""
    latest = engine.latest_frame()
    if latest is None:
        latest = engine.preview()
    return latest.image


@router.get("/state")
async def get_state(request: Request):
    engine = _get_engine(request)
    return engine.get_state()


@router.get("/rivals")
async def get_rivals(request: Request):
    engine = _get_engine(request)
    return [r.to_dict() for r in engine.active_rivals()]


@router.post("/mode")
async def set_mode(body: ModeRequest, request: Request):
    """Switch between tactical, weather and intel views."""
    engine = _get_engine(request)
    try:
        mode = engine.set_layer_mode(body.mode)
    except ValueError as e:
        raise HTTPException(400, str(e))
    return {"mode": mode.value}


@router.post("/start")
async def start_simulation(request: Request):
    engine = _get_engine(request)
    engine.start()
    return {"status": "running"}


@router.post("/stop")
async def stop_simulation(request: Request):
    engine = _get_engine(request)
    engine.stop()
    return {"status": "stopped"}


@router.post("/jam/{rival_id}")
async def jam_rival(rival_id: str, request: Request):
    """Jam a rival drone.  Unknown ids are reported, not an error."""
    engine = _get_engine(request)
    jammed = engine.jam(rival_id)
    return {"rival_id": rival_id, "jammed": jammed}


@router.post("/click")
async def click(event: PointerEvent, request: Request):
    engine = _get_engine(request)
    hit = engine.click(event.x, event.y)
    return hit_to_dict(hit)


@router.post("/hover")
async def hover(event: PointerEvent, request: Request):
    engine = _get_engine(request)
    hit = engine.hover(event.x, event.y)
    return hit_to_dict(hit)


@router.post("/resize")
async def resize(body: ResizeRequest, request: Request):
    engine = _get_engine(request)
    try:
        engine.resize(body.width, body.height)
    except ValueError as e:
        raise HTTPException(400, str(e))
    return {"width": body.width, "height": body.height}


@router.get("/frame.jpg")
def get_frame(request: Request):
    """Latest rendered radar frame, encoded off the event loop."""
    engine = _get_engine(request)
    return Response(content=_encode_jpeg(_current_image(engine)), media_type="image/jpeg")


def mjpeg_frames(engine, fps: float = 10.0, limit: int | None = None) -> Generator[bytes, None, None]:
    """Yield MJPEG parts built from the engine's latest frames.

    ``limit`` bounds the number of parts (tests); None streams forever.
    """
    interval = 1.0 / max(1.0, fps)
    sent = 0
    while limit is None or sent < limit:
        jpeg = _encode_jpeg(_current_image(engine))
        yield (
            b"--frame\r\n"
            b"Content-Type: image/jpeg\r\n"
            b"Content-Length: " + str(len(jpeg)).encode() + b"\r\n"
            b"\r\n" + jpeg + b"\r\n"
        )
        sent += 1
        if limit is None or sent < limit:
            time.sleep(interval)


@router.get("/mjpeg")
async def get_mjpeg(request: Request, fps: float = 10.0, limit: int | None = None):
    """Stream the radar as multipart/x-mixed-replace, for <img> tags."""
    engine = _get_engine(request)
    return StreamingResponse(
        mjpeg_frames(engine, fps=fps, limit=limit),
        media_type="multipart/x-mixed-replace; boundary=frame",
    )


@router.get("/notifications")
async def get_notifications(request: Request, limit: int = 20):
    engine = _get_engine(request)
    return [n.to_dict() for n in engine.notifications.recent(limit)]
