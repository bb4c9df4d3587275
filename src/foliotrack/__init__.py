"""
foliotrack - Personal Portfolio Tracker

Replays buy/sell transactions into holdings, realized P&L and a
multi-currency dashboard.
"""

from importlib.metadata import version

try:
    __version__ = version("foliotrack")
except Exception:
    __version__ = "0.0.0.dev"  # Fallback for development


__all__ = [
    "__version__",
]
