"""
Domain events system

Tenant data stores publish events when their snapshot changes. Each store
owns its own EventBus; subscribers (theme projection, notices) attach to the
store they care about.
"""

from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional
import asyncio
import inspect
import uuid
import structlog

logger = structlog.get_logger(__name__)


class DomainEvent:
    """Base class for domain events"""

    def __init__(self, event_id: uuid.UUID = None):
        self.event_id = event_id or uuid.uuid4()
        self.occurred_at = datetime.now(timezone.utc)

    def to_dict(self) -> Dict[str, Any]:
        """Convert event to dictionary"""
        return {
            "event_id": str(self.event_id),
            "occurred_at": self.occurred_at.isoformat(),
            "event_type": self.__class__.__name__
        }


class TenantLoaded(DomainEvent):
    """Event fired when a store finishes initializing"""

    def __init__(self, slug: str, source: str, found: bool, event_id: uuid.UUID = None):
        super().__init__(event_id)
        self.slug = slug
        self.source = source
        self.found = found

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data.update({
            "slug": self.slug,
            "source": self.source,
            "found": self.found
        })
        return data


class BusinessUpdated(DomainEvent):
    """Event fired when business fields change"""

    def __init__(self, slug: str, fields: List[str], event_id: uuid.UUID = None):
        super().__init__(event_id)
        self.slug = slug
        self.fields = fields

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data.update({
            "slug": self.slug,
            "fields": self.fields
        })
        return data


class CategoryDeleted(DomainEvent):
    """Event fired when a category and its products leave the snapshot"""

    def __init__(
        self,
        slug: str,
        category_id: str,
        removed_product_ids: List[str],
        event_id: uuid.UUID = None
    ):
        super().__init__(event_id)
        self.slug = slug
        self.category_id = category_id
        self.removed_product_ids = removed_product_ids

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data.update({
            "slug": self.slug,
            "category_id": self.category_id,
            "removed_product_ids": self.removed_product_ids
        })
        return data


class RemoteWriteFailed(DomainEvent):
    """Event fired when a forwarded write is rejected or never arrives"""

    def __init__(
        self,
        slug: str,
        mutation_id: str,
        operation: str,
        error: str,
        event_id: uuid.UUID = None
    ):
        super().__init__(event_id)
        self.slug = slug
        self.mutation_id = mutation_id
        self.operation = operation
        self.error = error

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data.update({
            "slug": self.slug,
            "mutation_id": self.mutation_id,
            "operation": self.operation,
            "error": self.error
        })
        return data


class EventBus:
    """Simple in-memory event bus for publishing domain events

    Handlers may be plain functions or coroutine functions.
    """

    def __init__(self):
        self._subscribers: Dict[str, List[Callable]] = {}
        self._tasks: set = set()

    def subscribe(self, event_type: str, handler: Callable):
        """Subscribe to a specific event type"""
        if event_type not in self._subscribers:
            self._subscribers[event_type] = []
        self._subscribers[event_type].append(handler)
        logger.debug(f"Subscribed handler to event type: {event_type}")

    def unsubscribe(self, event_type: str, handler: Callable):
        """Unsubscribe from an event type"""
        if event_type in self._subscribers:
            self._subscribers[event_type].remove(handler)
            logger.debug(f"Unsubscribed handler from event type: {event_type}")

    async def publish(self, event: DomainEvent):
        """Publish an event to all subscribers, awaiting async handlers"""
        event_type = event.__class__.__name__
        handlers = self._subscribers.get(event_type, [])

        if not handlers:
            logger.debug(f"No subscribers for event type: {event_type}")
            return

        logger.info(f"Publishing event {event_type}: {event.event_id}")

        for handler in list(handlers):
            try:
                result = handler(event)
                if inspect.isawaitable(result):
                    await result
            except Exception as e:
                logger.error(f"Error in event handler for {event_type}: {e}", exc_info=True)

    def emit(self, event: DomainEvent):
        """Publish from synchronous code

        Plain handlers run immediately; async handlers are scheduled on the
        running loop.
        """
        event_type = event.__class__.__name__
        handlers = self._subscribers.get(event_type, [])
        if not handlers:
            logger.debug(f"No subscribers for event type: {event_type}")
            return

        for handler in list(handlers):
            try:
                result = handler(event)
                if inspect.isawaitable(result):
                    self._schedule(result, event_type)
            except Exception as e:
                logger.error(f"Error in event handler for {event_type}: {e}", exc_info=True)

    def _schedule(self, awaitable, event_type: str):
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            if inspect.iscoroutine(awaitable):
                awaitable.close()
            logger.warning(f"No running loop, dropped async handler for {event_type}")
            return
        task = asyncio.ensure_future(awaitable, loop=loop)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    def clear_subscribers(self):
        """Clear all subscribers (useful for testing)"""
        self._subscribers.clear()
        logger.debug("Cleared all event subscribers")

    def subscriber_count(self, event_type: Optional[str] = None) -> int:
        if event_type is None:
            return sum(len(h) for h in self._subscribers.values())
        return len(self._subscribers.get(event_type, []))
