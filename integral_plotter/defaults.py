"""Default settings used when a workspace or slot is created without overrides."""

from __future__ import annotations

from .IntegrationResult import QuadratureRule

DEFAULT_EXPRESSION = "x^2"

# Viewport
DEFAULT_MIN_X = -1.0
DEFAULT_MAX_X = 1.0
DEFAULT_PIXEL_WIDTH = 100

# Integration
DEFAULT_INTEGRAL_MIN_X = -1.0
DEFAULT_INTEGRAL_MAX_X = 1.0
DEFAULT_INTEGRAL_NUM = 100
DEFAULT_RULE = QuadratureRule.LEFT
INTEGRAL_NUM_RANGE = (1, 50_000)
INTEGRAL_X_RANGE = (-1000.0, 1000.0)

# Below this many evaluations a thread pool costs more than it saves.
PARALLEL_MIN_POINTS = 512
