from .backoff import BackoffPolicy
from .refresh_scheduler import RefreshScheduler

__all__ = ['BackoffPolicy', 'RefreshScheduler']
