"""Radar rendering -- layer modes, palette, frame pipeline, hit-testing."""
from .hit_test import NO_HIT, Hit, NoHit, RivalHit, TargetHit, hit_to_dict, resolve
from .layers import STYLES, LayerModeController, LayerStyle, ViewLayerMode, style_for
from .pipeline import RenderedFrame, RenderPipeline

__all__ = [
    "Hit",
    "LayerModeController",
    "LayerStyle",
    "NO_HIT",
    "NoHit",
    "RenderPipeline",
    "RenderedFrame",
    "RivalHit",
    "STYLES",
    "TargetHit",
    "ViewLayerMode",
    "hit_to_dict",
    "resolve",
    "style_for",
]
