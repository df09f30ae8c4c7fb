from voyagematch.models.catalog import Accommodation, Destination, Flight
from voyagematch.models.search_history import SearchHistory

__all__ = [
    "Accommodation",
    "Destination",
    "Flight",
    "SearchHistory",
]
