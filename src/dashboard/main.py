"""RIVAL RADAR - tactical rival simulation dashboard.

Main FastAPI application, plus a small CLI that serves it or opens the
OpenCV viewer.
"""

from __future__ import annotations

import argparse
import random
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger

from dashboard.config import Settings, settings
from dashboard.records import TargetRegistry, demo_targets, load_layout
from dashboard.routers import radar_router, targets_router
from dashboard.weather import WeatherCycle
from radar import __version__
from radar.comms.event_bus import EventBus
from radar.comms.notifications import NotificationLog
from radar.simulation.drivers import PeriodicDriver
from radar.simulation.engine import RadarEngine
from radar.simulation.rivals import RivalParams


# ---------------------------------------------------------------------------
# Subsystem startup helpers
# ---------------------------------------------------------------------------

def _load_targets(cfg: Settings, rng: random.Random) -> list:
    """Targets from the configured layout, or demo data when there is none."""
    if cfg.target_layout:
        layout_path = Path(cfg.target_layout)
        if layout_path.exists():
            targets = load_layout(layout_path)
            logger.info(f"Targets: loaded {len(targets)} from {layout_path}")
            return targets
        logger.warning(f"Target layout not found: {layout_path}, using demo targets")
    return demo_targets(cfg.map_center_lat, cfg.map_center_lng, cfg.demo_target_count, rng)


def create_subsystems(cfg: Settings = settings) -> tuple[RadarEngine, TargetRegistry, WeatherCycle, PeriodicDriver]:
    """Build the registry, engine, weather cycle and team driver.  Nothing is started."""
    rng = random.Random(cfg.random_seed)
    event_bus = EventBus()
    notifications = NotificationLog(event_bus)

    registry = TargetRegistry(_load_targets(cfg, rng), notifications)
    params = RivalParams(
        capture_threshold=cfg.rival_capture_threshold,
        step_scale=cfg.rival_step_scale,
        spawn_probability=cfg.rival_spawn_probability,
        max_rivals=cfg.rival_max_active,
    )
    engine = RadarEngine(
        registry,
        event_bus,
        width=cfg.radar_width,
        height=cfg.radar_height,
        padding=cfg.radar_padding,
        tick_interval=cfg.rival_tick_interval,
        fps=cfg.radar_fps,
        params=params,
        hazard_count=cfg.hazard_count,
        rng=rng,
        notifications=notifications,
    )
    weather = WeatherCycle(notifications, cfg.weather_interval, rng)
    team_driver = PeriodicDriver("team-progress", cfg.team_tick_interval, registry.advance_teams)
    return engine, registry, weather, team_driver


def _shutdown_subsystems(app: FastAPI) -> None:
    """Shut down all subsystems in reverse startup order."""
    weather = getattr(app.state, "weather", None)
    if weather is not None:
        logger.info("Stopping weather cycle...")
        weather.stop()

    team_driver = getattr(app.state, "team_driver", None)
    if team_driver is not None:
        logger.info("Stopping team progression...")
        team_driver.stop()

    engine = getattr(app.state, "radar_engine", None)
    if engine is not None:
        logger.info("Stopping radar engine...")
        engine.shutdown()


# ---------------------------------------------------------------------------
# Lifespan
# ---------------------------------------------------------------------------

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    logger.info("=" * 60)
    logger.info(f"  {settings.app_name} v{__version__} - INITIALIZING")
    logger.info("=" * 60)

    engine, registry, weather, team_driver = create_subsystems(settings)
    app.state.radar_engine = engine
    app.state.target_registry = registry
    app.state.weather = weather
    app.state.team_driver = team_driver

    engine.start()
    engine.start_rendering()
    team_driver.start()
    weather.start()
    logger.info(
        f"Radar engine started: {len(registry)} targets, "
        f"{engine.size[0]}x{engine.size[1]} @ {settings.radar_fps:.0f} fps"
    )

    logger.info("=" * 60)
    logger.info(f"  {settings.app_name} ONLINE")
    logger.info("=" * 60)

    yield

    _shutdown_subsystems(app)
    logger.info(f"{settings.app_name} shutting down...")


# Create FastAPI app
app = FastAPI(
    title="RIVAL RADAR",
    description="Rival drone simulation over a geospatial radar",
    version=__version__,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(radar_router)
app.include_router(targets_router)


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {
        "status": "operational",
        "version": __version__,
        "system": "RIVAL RADAR",
    }


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Rival radar dashboard")
    parser.add_argument("--viewer", action="store_true", help="open the OpenCV radar window instead of serving HTTP")
    parser.add_argument("--host", default=settings.host)
    parser.add_argument("--port", type=int, default=settings.port)
    args = parser.parse_args(argv)

    if args.viewer:
        from dashboard.viewer import run_viewer
        run_viewer(settings)
        return

    import uvicorn
    uvicorn.run("dashboard.main:app", host=args.host, port=args.port, log_level="debug" if settings.debug else "info")


if __name__ == "__main__":
    main()
