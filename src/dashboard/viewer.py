"""Desktop radar viewer -- an OpenCV window on top of RadarEngine.

Mouse:  move = hover tooltip, left click = jam rival / select target
Keys:   t = tactical, w = weather, i = intel, q / Esc = quit
"""

from __future__ import annotations

import cv2
from loguru import logger

from dashboard.config import Settings
from radar.render.hit_test import TargetHit

WINDOW = "RIVAL RADAR"

_MODE_KEYS = {
    ord("t"): "tactical",
    ord("w"): "weather",
    ord("i"): "intel",
}
_QUIT_KEYS = {ord("q"), 27}


def handle_key(engine, key: int) -> bool:
    """Apply one key press.  Returns False when the viewer should exit."""
    if key in _QUIT_KEYS:
        return False
    mode = _MODE_KEYS.get(key)
    if mode is not None:
        engine.set_layer_mode(mode)
    return True


def handle_mouse(engine, event: int, x: int, y: int) -> None:
    if event == cv2.EVENT_MOUSEMOVE:
        engine.hover(x, y)
    elif event == cv2.EVENT_LBUTTONDOWN:
        hit = engine.click(x, y)
        if isinstance(hit, TargetHit):
            logger.info(f"Selected target {hit.target.target_id} ({hit.target.label})")


def run_viewer(cfg: Settings) -> None:
    from dashboard.main import create_subsystems

    engine, registry, weather, team_driver = create_subsystems(cfg)
    engine.event_bus.add_listener(
        "notification", lambda data: logger.info(f"[{data['severity']}] {data['message']}"),
    )

    cv2.namedWindow(WINDOW)
    cv2.setMouseCallback(WINDOW, lambda event, x, y, flags, param: handle_mouse(engine, event, x, y))

    engine.start()
    team_driver.start()
    weather.start()
    logger.info(f"Viewer open with {len(registry)} targets (t/w/i to switch layers, q to quit)")

    delay_ms = max(1, int(1000 / cfg.radar_fps))
    try:
        while True:
            rendered = engine.frame()
            cv2.imshow(WINDOW, rendered.image)
            if not handle_key(engine, cv2.waitKey(delay_ms) & 0xFF):
                break
    finally:
        weather.stop()
        team_driver.stop()
        engine.shutdown()
        cv2.destroyAllWindows()
