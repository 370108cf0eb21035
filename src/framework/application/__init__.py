from .query_bus import Query, QueryHandler, QueryBus

__all__ = [
    "Query",
    "QueryHandler",
    "QueryBus",
]
