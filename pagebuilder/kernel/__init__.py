"""
Page Builder Kernel -- the live sync engine.

Components:
  fields       -- field registry and visibility toggles
  bindings     -- field → preview node binding table
  reducer      -- (state, event) → state + node patches  (pure, deterministic)
  renderer     -- host document → portable HTML          (pure)
  coordinator  -- owns state, applies patches, handles uploads/print/export

Pure helpers:
  arc_path, compute_scale, composite_background
"""

from pagebuilder.kernel.bindings import DEFAULT_BINDINGS, BindingTable, validate_bindings
from pagebuilder.kernel.coordinator import BindingError, NotLoaded, RenderCoordinator
from pagebuilder.kernel.fields import DEFAULT_REGISTRY, FieldRegistry
from pagebuilder.kernel.geometry import arc_path, compute_scale
from pagebuilder.kernel.reducer import empty_state, recompute_arc, reduce, replay
from pagebuilder.kernel.renderer import render
from pagebuilder.kernel.styles import composite_background
from pagebuilder.kernel.validation import validate_event

__all__ = [
    "validate_event",
    "reduce",
    "replay",
    "empty_state",
    "recompute_arc",
    "render",
    "arc_path",
    "compute_scale",
    "composite_background",
    "validate_bindings",
    "BindingTable",
    "FieldRegistry",
    "DEFAULT_BINDINGS",
    "DEFAULT_REGISTRY",
    "RenderCoordinator",
    "BindingError",
    "NotLoaded",
]
