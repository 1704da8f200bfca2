import asyncio
import logging
from typing import Awaitable, Callable, Generic, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ResourceProvider(Generic[T]):
    """Owns one process-wide resource with an initialize-once contract.

    ``acquire()`` creates the resource on first use and hands the same
    instance to every later caller. Callers that arrive while creation is in
    flight wait on the lock and get that result. A failed creation is not
    remembered, so the next ``acquire()`` tries again.
    """

    def __init__(
        self,
        name: str,
        factory: Callable[[], Awaitable[T]],
        closer: Optional[Callable[[T], Awaitable[None]]] = None,
    ):
        self.name = name
        self._factory = factory
        self._closer = closer
        self._resource: Optional[T] = None
        self._lock: Optional[asyncio.Lock] = None

    def _get_lock(self) -> asyncio.Lock:
        if self._lock is None:
            self._lock = asyncio.Lock()
        return self._lock

    @property
    def ready(self) -> bool:
        return self._resource is not None

    async def acquire(self) -> T:
        if self._resource is not None:
            return self._resource

        async with self._get_lock():
            if self._resource is None:
                logger.info(f"Initializing {self.name}...")
                self._resource = await self._factory()
                logger.info(f"{self.name} ready")
            return self._resource

    def current(self) -> Optional[T]:
        return self._resource

    async def close(self) -> None:
        async with self._get_lock():
            resource, self._resource = self._resource, None
            if resource is not None and self._closer is not None:
                await self._closer(resource)
                logger.info(f"{self.name} closed")
