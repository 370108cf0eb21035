import re
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, Generic, Type, TypeVar


class Query(ABC):
    """Base class for read-side requests dispatched through the QueryBus."""
    pass


TQuery = TypeVar('TQuery', bound=Query)
TResult = TypeVar('TResult')


class QueryHandler(ABC, Generic[TQuery, TResult]):
    """Handles exactly one Query type."""

    @abstractmethod
    def handle(self, query: TQuery) -> TResult:
        pass


def handler_provider_name(query_type: Type[Query]) -> str:
    """PlanTripQuery -> plan_trip_query_handler."""
    name = f"{query_type.__name__}Handler"
    name = re.sub('(.)([A-Z][a-z]+)', r'\1_\2', name)
    return re.sub('([a-z0-9])([A-Z])', r'\1_\2', name).lower()


class QueryBus:
    """Dispatches queries to handlers provided by a DI container.

    The container must expose one provider per query, named after the
    query class in snake_case with a ``_handler`` suffix. A fresh handler
    is built for every query.
    """

    def __init__(self, container: Any) -> None:
        self.container = container
        self._providers: Dict[Type[Query], Callable[[], QueryHandler]] = {}

    def query(self, query: Query) -> Any:
        query_type = type(query)
        provider = self._providers.get(query_type)
        if provider is None:
            name = handler_provider_name(query_type)
            provider = getattr(self.container, name, None)
            if provider is None:
                raise LookupError(f"No handler registered for {query_type.__name__} (expected '{name}')")
            self._providers[query_type] = provider
        return provider().handle(query)
