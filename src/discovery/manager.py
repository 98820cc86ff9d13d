"""
Adapter discovery: enumerate remote entries, classify them in parallel and
keep the ones matching a target classification

The connection passed in only needs two coroutines:
    list_entries() -> sequence of entry references
    classify_entry(ref) -> classification value
"""

import asyncio
import logging
import time
from typing import Dict, List, Optional, Sequence

from errors import BusConnectionError, ClassificationError, NoMatchingEntriesError, ProvisioningError
from .models import DeviceType, DiscoveryResult

logger = logging.getLogger(__name__)

async def _with_timeout(awaitable, timeout: Optional[float]):
    if timeout is None:
        return await awaitable
    return await asyncio.wait_for(awaitable, timeout)

async def list_entries(connection, request_timeout: Optional[float] = None) -> List[str]:
    """
    Issue the single enumeration call
    Any failure, including a timeout, is reported as a bus connection error
    """
    try:
        entries = await _with_timeout(connection.list_entries(), request_timeout)
    except ProvisioningError:
        raise
    except Exception as e:
        raise BusConnectionError(f"Failed to enumerate entries: {e!r}", e) from e
    return list(entries or [])

async def _classify(connection, ref: str, request_timeout: Optional[float]):
    try:
        return await _with_timeout(connection.classify_entry(ref), request_timeout)
    except Exception as e:
        raise ClassificationError(ref, e) from e

async def classify_entries(connection, entries: Sequence[str],
                           request_timeout: Optional[float] = None) -> Dict[str, int]:
    """
    Classify every distinct entry concurrently and return a ref -> classification map

    Waits for all calls or for the first failure. On failure the calls still in
    flight are cancelled and the ClassificationError of the earliest failing
    entry (in enumeration order) is raised.
    """
    # A ref listed twice is classified once; the join below is keyed by ref
    refs = list(dict.fromkeys(entries))
    if not refs:
        return {}

    tasks = {ref: asyncio.ensure_future(_classify(connection, ref, request_timeout)) for ref in refs}

    try:
        done, pending = await asyncio.wait(tasks.values(), return_when=asyncio.FIRST_EXCEPTION)
    except asyncio.CancelledError:
        for task in tasks.values():
            task.cancel()
        await asyncio.gather(*tasks.values(), return_exceptions=True)
        raise

    if pending:
        logger.debug(f"Cancelling {len(pending)} outstanding classification calls")
        for task in pending:
            task.cancel()
        await asyncio.gather(*pending, return_exceptions=True)

    # Retrieve every exception so none is reported as unhandled
    failures = [tasks[ref].exception() for ref in refs
                if tasks[ref].done() and not tasks[ref].cancelled() and tasks[ref].exception() is not None]
    if failures:
        raise failures[0]

    return {ref: tasks[ref].result() for ref in refs}

async def discover_entries(connection, target_classification: int,
                           request_timeout: Optional[float] = None) -> DiscoveryResult:
    """Run one discovery pass and return the matches with bookkeeping"""
    start_time = time.time()

    entries = await list_entries(connection, request_timeout)
    if not entries:
        return DiscoveryResult([], target_classification, time.time() - start_time, 0, 0)

    classifications = await classify_entries(connection, entries, request_timeout)
    matches = [ref for ref in entries if classifications[ref] == target_classification]

    return DiscoveryResult(
        entries=matches,
        target=target_classification,
        duration_seconds=time.time() - start_time,
        entries_tested=len(classifications),
        match_count=len(matches),
        classifications=classifications
    )

async def discover(connection, target_classification: int,
                   request_timeout: Optional[float] = None) -> List[str]:
    """
    Return the entries whose classification equals target_classification,
    in the order the enumeration call returned them. May be empty.
    """
    result = await discover_entries(connection, target_classification, request_timeout)
    return result.entries


class AdapterDiscovery:
    """Finds network adapters of a given type through a NetworkManager client"""

    def __init__(self, client, config: Dict, request_timeout: Optional[float] = None):
        self.client = client
        self.config = config
        self.request_timeout = request_timeout
        self.device_type = DeviceType.resolve(config.get('device_type', 'wifi'))

    async def discover_adapters(self, device_type: Optional[int] = None) -> DiscoveryResult:
        target = self.device_type if device_type is None else device_type
        logger.info(f"[SEARCH] Looking for network adapters of type {_type_label(target)}...")

        result = await discover_entries(self.client, target, self.request_timeout)

        logger.info(f"[PASS] Discovery complete: {result.match_count} of {result.entries_tested} "
                    f"adapters matched in {result.duration_seconds:.2f}s")
        for ref, code in result.classifications.items():
            logger.debug(f"Adapter {ref}: type {_type_label(code)}")
        return result

    async def select_adapter(self) -> str:
        """Pick the first adapter of the configured type"""
        result = await self.discover_adapters()
        if not result.entries:
            raise NoMatchingEntriesError(_type_label(result.target), result.entries_tested)

        adapter = result.entries[0]
        if result.match_count > 1:
            logger.info(f"{result.match_count} matching adapters found, using the first: {adapter}")
        else:
            logger.info(f"[OK] Using adapter {adapter}")
        return adapter

def _type_label(code) -> str:
    try:
        return f"{DeviceType(code).name} ({int(code)})"
    except ValueError:
        return str(code)
