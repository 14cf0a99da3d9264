"""stylecast: runtime style configuration resolution.

Resolves layered theme, page and component style fragments into read-only
configurations, caches them, and synthesizes CSS text from them.
"""

from stylecast.engine import StyleEngine

__all__ = ["StyleEngine"]
__version__ = "0.1.0"
