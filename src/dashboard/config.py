"""Configuration management using Pydantic settings."""

from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "RIVAL RADAR"
    debug: bool = False

    # Server
    host: str = "0.0.0.0"
    port: int = 8000

    # Map center -- demo targets are scattered around this point
    map_center_lat: float = 35.4676
    map_center_lng: float = -97.5164

    # Radar surface
    radar_width: int = 800
    radar_height: int = 600
    radar_padding: float = 50.0
    radar_fps: float = 30.0

    # Rival simulation
    rival_tick_interval: float = 1.0     # seconds per simulation tick
    rival_spawn_probability: float = 0.10
    rival_max_active: int = 3
    rival_capture_threshold: float = 0.001
    rival_step_scale: float = 0.002
    hazard_count: int = 3

    # Shell drivers
    team_tick_interval: float = 1.0
    weather_interval: float = 45.0

    # Targets
    target_layout: str = ""               # JSON list of targets; empty = demo data
    demo_target_count: int = 12
    random_seed: Optional[int] = None     # fixed seed for reproducible demos


settings = Settings()
