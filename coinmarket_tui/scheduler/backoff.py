from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class BackoffPolicy:
    """Refresh interval after a run of consecutive failures.

    ``base * factor ** failures``, capped at ``ceiling`` (never below ``base``).
    """
    base: float
    ceiling: float
    factor: float = 2.0

    def __post_init__(self):
        if self.base <= 0:
            raise ValueError("Refresh interval must be positive")
        if self.factor < 1:
            raise ValueError("Backoff factor must be at least 1")

    def interval(self, consecutive_failures: int) -> float:
        cap = max(self.ceiling, self.base)
        if consecutive_failures <= 0:
            return self.base
        # Stop multiplying once past the cap so long outages cannot overflow
        delay = self.base
        for _ in range(consecutive_failures):
            delay *= self.factor
            if delay >= cap:
                return cap
        return delay
