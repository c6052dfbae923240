from dataclasses import dataclass

from coinmarket_tui.models.sorting import SortDirection, SortKey


@dataclass(slots=True)
class AppOptions:
    """Parsed runtime options handed to the app loop."""
    refresh_interval: float = 5.0
    backoff_ceiling: float = 60.0
    initial_sort_key: SortKey = SortKey.BY_NAME
    initial_sort_direction: SortDirection = SortDirection.ASCENDING
    ui_tick: float = 1.0 / 30
    fetch_timeout: float = 10.0
    theme_index: int = 0
    filter_text: str = ""

    def __post_init__(self):
        if self.refresh_interval <= 0:
            raise ValueError(f"refresh_interval must be positive, got {self.refresh_interval}")
        if self.ui_tick <= 0:
            raise ValueError(f"ui_tick must be positive, got {self.ui_tick}")
        if self.fetch_timeout <= 0:
            raise ValueError(f"fetch_timeout must be positive, got {self.fetch_timeout}")
        # A ceiling below the base interval would shorten waits after failures
        self.backoff_ceiling = max(self.backoff_ceiling, self.refresh_interval)
