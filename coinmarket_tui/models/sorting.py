from enum import Enum


class SortKey(Enum):
    BY_NAME = "name"
    BY_PRICE = "price"
    BY_CHANGE = "change"
    BY_VOLUME = "volume"

    @classmethod
    def parse(cls, value: str) -> 'SortKey':
        """Accept either the enum name or its short value (case-insensitive)."""
        normalized = str(value).strip().lower()
        for key in cls:
            if normalized in (key.value, key.name.lower()):
                return key
        valid = ", ".join(f'"{k.value}"' for k in cls)
        raise ValueError(f"Unknown sort key '{value}'. Supported values are: {valid}.")


class SortDirection(Enum):
    ASCENDING = "asc"
    DESCENDING = "desc"

    def toggled(self) -> 'SortDirection':
        if self is SortDirection.ASCENDING:
            return SortDirection.DESCENDING
        return SortDirection.ASCENDING
