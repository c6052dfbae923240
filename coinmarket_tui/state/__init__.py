from .market_state import MarketState, MarketSnapshot, sort_records, matches_filter

__all__ = ['MarketState', 'MarketSnapshot', 'sort_records', 'matches_filter']
