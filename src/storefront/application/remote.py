"""I/O boundary for catalog store calls.

Every remote call made by an application service goes through
``remote_call`` so that a hung store cannot block an operation forever and
transport failures reach the service as a RemoteIOError.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable
from typing import TypeVar

from storefront.domain.exceptions import RemoteIOError
from storefront.domain.repository.catalog_store import CatalogStoreError

log = logging.getLogger(__name__)

T = TypeVar("T")


async def remote_call(awaitable: Awaitable[T], timeout: float | None, what: str) -> T:
    try:
        return await asyncio.wait_for(awaitable, timeout)
    except asyncio.TimeoutError as exc:
        log.warning("Catalog store timed out after %ss while %s", timeout, what)
        raise RemoteIOError(f"Catalog store timed out while {what}") from exc
    except CatalogStoreError as exc:
        log.warning("Catalog store failed while %s: %s", what, exc)
        raise RemoteIOError(str(exc)) from exc
