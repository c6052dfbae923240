from .loader import Config
from .options import AppOptions

__all__ = ['Config', 'AppOptions']
