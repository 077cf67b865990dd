from __future__ import annotations


class PlotDataError(ValueError):
    """Raised when chart inputs cannot be turned into a drawable scene."""
