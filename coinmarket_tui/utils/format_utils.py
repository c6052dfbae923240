"""
Formatting helpers for ticker values shown in the dashboard table.
"""
import math
from datetime import datetime
from typing import Optional


class FormatUtils:
    """Formats prices, percentages, volumes and timestamps for display."""

    def fmt_price(self, val, precision: int = 4) -> str:
        """Format a price with precision based on its magnitude"""
        if isinstance(val, (int, float)) and not math.isnan(val):
            if 0 < abs(val) < 0.0000001:  # Only use scientific notation for extremely small values
                return f"{val:.{precision}e}"
            elif abs(val) < 0.00001:  # SHIB and similar small coins
                return f"{val:.8f}"
            elif abs(val) < 0.0001:
                return f"{val:.7f}"
            elif abs(val) < 0.001:
                return f"{val:.6f}"
            elif abs(val) < 0.01:
                return f"{val:.5f}"
            elif abs(val) < 1:
                return f"{val:.{precision}f}"
            else:
                return f"{val:,.2f}"
        return "N/A"

    def fmt_pct(self, val) -> str:
        if isinstance(val, (int, float)) and not math.isnan(val):
            return f"{val:+.2f}%"
        return "N/A"

    def fmt_volume(self, val) -> str:
        """Compact volume: 1.23K, 4.56M, 7.89B."""
        if not isinstance(val, (int, float)) or math.isnan(val):
            return "N/A"
        for threshold, suffix in ((1e12, "T"), (1e9, "B"), (1e6, "M"), (1e3, "K")):
            if abs(val) >= threshold:
                return f"{val / threshold:.2f}{suffix}"
        return f"{val:.2f}"

    def fmt_time(self, moment: Optional[datetime], fmt: str = "%H:%M:%S") -> str:
        """Render a timestamp in local time, or a placeholder when missing."""
        if moment is None:
            return "never"
        try:
            return moment.astimezone().strftime(fmt)
        except (ValueError, OSError):
            return moment.strftime(fmt)
