# document collections with create/put/delete and live full-snapshot subscriptions
from __future__ import annotations

import asyncio
import inspect
import json
import secrets
import string
from collections import defaultdict
from contextlib import asynccontextmanager
from typing import Any, Awaitable, Callable, Dict, List, Optional, Set, Union

import aiosqlite

from db.database import connect
from utils.config import settings
from utils.errors import RemoteOperationError
from utils.logger import get_logger

_logger = get_logger(__name__)

Record = Dict[str, Any]
SnapshotCallback = Callable[[List[Record]], Union[None, Awaitable[None]]]
ErrorCallback = Callable[[Exception], Union[None, Awaitable[None]]]

_ID_ALPHABET = string.ascii_letters + string.digits
_ID_LENGTH = 20


def generate_doc_id() -> str:
    return "".join(secrets.choice(_ID_ALPHABET) for _ in range(_ID_LENGTH))


async def _maybe_await(result) -> None:
    if inspect.isawaitable(result):
        await result


@asynccontextmanager
async def _remote(operation: str, collection: str):
    """Translate storage failures into RemoteOperationError, logging them once."""
    try:
        yield
    except (aiosqlite.Error, OSError, ValueError) as e:
        _logger.error(f"{operation} on {collection} failed: {e}")
        raise RemoteOperationError(operation, collection, e) from e


class Subscription:
    """
    Handle on a running snapshot listener.
    Call cancel() to stop it; wait() returns once the listener task has ended.
    """

    def __init__(self, collection: str, task: asyncio.Task) -> None:
        self.collection = collection
        self._task = task

    @property
    def active(self) -> bool:
        return not self._task.done()

    def cancel(self) -> None:
        self._task.cancel()

    async def wait(self) -> None:
        try:
            await self._task
        except asyncio.CancelledError:
            pass


class DocumentGateway:
    """
    Logical collections of JSON documents kept in the SQLite documents table.

    Subscribers get the whole collection every time it changes, never a diff.
    Writes made through any gateway in this process wake the listeners
    immediately; listeners also poll so writes from other processes sharing
    the database file are picked up.
    """

    def __init__(self, poll_interval: Optional[float] = None) -> None:
        self.poll_interval = poll_interval or settings.poll_interval
        self._wakeups: Dict[str, Set[asyncio.Event]] = defaultdict(set)

    # ---------------------------
    # Writes
    # ---------------------------

    async def create_record(self, collection: str, data: Record) -> str:
        """Insert a new document under a generated id and return the id."""
        doc_id = generate_doc_id()
        async with _remote("create", collection):
            body = json.dumps(data, sort_keys=True)
            async with connect() as conn:
                await conn.execute(
                    "INSERT INTO documents(collection, doc_id, data) VALUES (?, ?, ?);",
                    (collection, doc_id, body),
                )
                await conn.commit()
        _logger.debug(f"Created {collection}/{doc_id}")
        self._notify(collection)
        return doc_id

    async def put_record(
        self, collection: str, doc_id: str, data: Record, merge: bool = False
    ) -> None:
        """
        Write a document at a known id, creating it if missing.
        merge=False replaces the whole body; merge=True only sets the given fields.
        """
        async with _remote("put", collection):
            async with connect() as conn:
                body = dict(data)
                if merge:
                    cur = await conn.execute(
                        "SELECT data FROM documents WHERE collection = ? AND doc_id = ?;",
                        (collection, doc_id),
                    )
                    row = await cur.fetchone()
                    await cur.close()
                    if row:
                        body = {**json.loads(row[0]), **data}
                await conn.execute(
                    """
                    INSERT INTO documents(collection, doc_id, data)
                    VALUES (?, ?, ?)
                    ON CONFLICT(collection, doc_id) DO UPDATE SET
                        data = excluded.data,
                        updated_at = strftime('%Y-%m-%dT%H:%M:%f', 'now');
                    """,
                    (collection, doc_id, json.dumps(body, sort_keys=True)),
                )
                await conn.commit()
        _logger.debug(f"Put {collection}/{doc_id} (merge={merge})")
        self._notify(collection)

    async def delete_record(self, collection: str, doc_id: str) -> None:
        """Delete a document; deleting a missing id is not an error."""
        async with _remote("delete", collection):
            async with connect() as conn:
                await conn.execute(
                    "DELETE FROM documents WHERE collection = ? AND doc_id = ?;",
                    (collection, doc_id),
                )
                await conn.commit()
        _logger.debug(f"Deleted {collection}/{doc_id}")
        self._notify(collection)

    # ---------------------------
    # Reads & subscriptions
    # ---------------------------

    async def get_records(self, collection: str) -> List[Record]:
        """Full snapshot of a collection ordered by id, each record carrying its id."""
        async with _remote("read", collection):
            async with connect() as conn:
                cur = await conn.execute(
                    "SELECT doc_id, data FROM documents WHERE collection = ? ORDER BY doc_id;",
                    (collection,),
                )
                rows = await cur.fetchall()
                await cur.close()
            return [{"id": row[0], **json.loads(row[1])} for row in rows]

    def subscribe(
        self,
        collection: str,
        on_change: SnapshotCallback,
        on_error: Optional[ErrorCallback] = None,
    ) -> Subscription:
        """
        Start delivering snapshots of `collection`, the first one right away.
        Must be called with a running event loop.
        """
        wakeup = asyncio.Event()
        self._wakeups[collection].add(wakeup)
        task = asyncio.create_task(
            self._listen(collection, wakeup, on_change, on_error),
            name=f"subscription:{collection}",
        )
        task.add_done_callback(lambda _: self._wakeups[collection].discard(wakeup))
        return Subscription(collection, task)

    def _notify(self, collection: str) -> None:
        for wakeup in self._wakeups.get(collection, ()):
            wakeup.set()

    async def _listen(
        self,
        collection: str,
        wakeup: asyncio.Event,
        on_change: SnapshotCallback,
        on_error: Optional[ErrorCallback],
    ) -> None:
        last: Optional[List[Record]] = None
        while True:
            try:
                snapshot = await self.get_records(collection)
            except RemoteOperationError as e:
                _logger.error(f"Error listening to {collection}: {e}")
                if on_error:
                    try:
                        await _maybe_await(on_error(e))
                    except Exception:
                        _logger.exception(f"Error handler for {collection} failed")
            else:
                if snapshot != last:
                    last = snapshot
                    try:
                        await _maybe_await(on_change(snapshot))
                    except Exception:
                        _logger.exception(f"Snapshot handler for {collection} failed")

            try:
                await asyncio.wait_for(wakeup.wait(), timeout=self.poll_interval)
            except asyncio.TimeoutError:
                pass
            wakeup.clear()
