'''
**reqkit.http._adapter**

The seam between `Session` and the network stack. A `SessionAdapter` turns a
wire request into a `SessionTask` and reports `(data, response, error)` back
exactly once per task. `HttpxAdapter` is the default backend, running each
task as an asyncio task that drives `httpx.AsyncClient.send`.
'''
import asyncio
import concurrent.futures
import enum
import logging
import threading
from collections.abc import Callable, Coroutine
from typing import Any, Protocol, Self, runtime_checkable

import httpx

from reqkit._errors import TaskCancelledError
from reqkit.http._client import ClientConfig, ReqkitClient

logger = logging.getLogger(__name__)

CompletionHandler = Callable[[bytes | None, object | None, BaseException | None], None]
TasksHandler = Callable[[list['SessionTask']], None]


@runtime_checkable
class SessionTask(Protocol):
    def resume(self) -> None:
        ...

    def cancel(self) -> None:
        ...


@runtime_checkable
class SessionAdapter(Protocol):
    def create_task(
        self,
        wire_request: httpx.Request,
        handler: CompletionHandler,
    ) -> SessionTask:
        '''
        Returns a task for the wire request, `handler` must be called
        exactly once after success, failure or cancellation.
        '''
        ...

    def get_tasks(self, handler: TasksHandler) -> None:
        ...


class TaskState(enum.Enum):
    CREATED = 'created'
    RUNNING = 'running'
    COMPLETED = 'completed'
    CANCELLED = 'cancelled'

    @property
    def is_terminal(self) -> bool:
        return self in (TaskState.COMPLETED, TaskState.CANCELLED)


class HttpxSessionTask:
    '''
    One in-flight `httpx` request.

    created -> running -> completed | cancelled
    '''
    __slots__ = (
        '_adapter',
        '_wire_request',
        '_handler',
        '_state',
        '_lock',
        '_future',
        '__weakref__',
    )

    def __init__(
        self,
        adapter: 'HttpxAdapter',
        wire_request: httpx.Request,
        handler: CompletionHandler,
    ) -> None:
        self._adapter = adapter
        self._wire_request = wire_request
        self._handler = handler
        self._state = TaskState.CREATED
        self._lock = threading.Lock()
        self._future: asyncio.Future | concurrent.futures.Future | None = None

    def __repr__(self) -> str:
        request = self._wire_request
        return f'<HttpxSessionTask {request.method} {request.url} [{self._state.value}]>'

    @property
    def state(self) -> TaskState:
        return self._state

    @property
    def wire_request(self) -> httpx.Request:
        return self._wire_request

    def resume(self) -> None:
        with self._lock:
            if self._state is not TaskState.CREATED:
                return
            self._state = TaskState.RUNNING

        try:
            self._future = self._adapter.schedule(self._run())
        except RuntimeError as exc:
            logger.warning(f'Could not schedule {self!r}: {exc}')
            self._finish(None, None, exc)

    def cancel(self) -> None:
        with self._lock:
            if self._state.is_terminal:
                return
            future = self._future

        if isinstance(future, asyncio.Future):
            future.get_loop().call_soon_threadsafe(future.cancel)
        elif future is not None:
            future.cancel()

        logger.debug(f'Cancelled {self!r}')
        self._finish(None, None, TaskCancelledError(), TaskState.CANCELLED)

    async def _run(self) -> None:
        if self._state is not TaskState.RUNNING:
            return

        try:
            response = await self._adapter.client.send(self._wire_request)
        except asyncio.CancelledError:
            self._finish(None, None, TaskCancelledError(), TaskState.CANCELLED)
            raise
        except Exception as exc:
            logger.warning(f'Transport error for {self!r}: {exc!r}')
            self._finish(None, None, exc)
            return

        self._finish(response.content, response, None)

    def _finish(
        self,
        data: bytes | None,
        response: object | None,
        error: BaseException | None,
        state: TaskState = TaskState.COMPLETED,
    ) -> None:
        with self._lock:
            if self._state.is_terminal:
                return
            self._state = state

        self._adapter.discard(self)
        try:
            self._handler(data, response, error)
        except Exception as exc:
            logger.warning(f'Completion handler for {self!r} failed: {exc!r}')


class HttpxAdapter:
    '''
    `SessionAdapter` backed by an `httpx.AsyncClient`.

    Tasks run on the event loop running in the thread that resumes them,
    or on `loop` when resumed from a thread without one.
    '''

    def __init__(
        self,
        client: httpx.AsyncClient,
        *,
        loop: asyncio.AbstractEventLoop | None = None,
    ) -> None:
        self.client = client
        self._loop = loop
        self._tasks: set[HttpxSessionTask] = set()
        self._lock = threading.Lock()

    @property
    def loop(self) -> asyncio.AbstractEventLoop | None:
        return self._loop

    @classmethod
    def from_config(
        cls,
        config: ClientConfig | None = None,
        *,
        base_url: str | None = None,
        headers: dict[str, str] | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        loop: asyncio.AbstractEventLoop | None = None,
    ) -> Self:
        '''
        Parameters
        ----------
        config : ClientConfig | None, optional
            The client configuration, by default `ClientConfig()`
        base_url : str | None, optional
            Base URL of the underlying client, by default None
        headers : dict[str, str] | None, optional
            Extra headers sent with every request, by default None
        transport : httpx.AsyncBaseTransport | None, optional
            Overrides the default `httpx.AsyncHTTPTransport`
        loop : asyncio.AbstractEventLoop | None, optional
            Loop used for tasks resumed outside of a running loop

        Returns
        -------
        HttpxAdapter
        '''
        client = ReqkitClient(
            base_url=base_url,
            headers=headers,
            config=config,
            transport=transport,
        )
        return cls(client, loop=loop)

    def create_task(
        self,
        wire_request: httpx.Request,
        handler: CompletionHandler,
    ) -> HttpxSessionTask:
        # client.send() skips the client's default headers
        for key, value in self.client.headers.items():
            wire_request.headers.setdefault(key, value)

        task = HttpxSessionTask(self, wire_request, handler)
        with self._lock:
            self._tasks.add(task)
        return task

    def get_tasks(self, handler: TasksHandler) -> None:
        with self._lock:
            tasks: list[SessionTask] = list(self._tasks)
        handler(tasks)

    def schedule(
        self,
        coro: Coroutine[Any, Any, None],
    ) -> asyncio.Future | concurrent.futures.Future:
        '''
        Raises
        ------
        RuntimeError
            If there is no running loop and no loop was configured.
        '''
        try:
            running = asyncio.get_running_loop()
        except RuntimeError:
            running = None

        if running is not None and self._loop in (None, running):
            return running.create_task(coro)

        if self._loop is None:
            coro.close()
            raise RuntimeError('no running event loop and no loop configured')

        return asyncio.run_coroutine_threadsafe(coro, self._loop)

    def discard(self, task: HttpxSessionTask) -> None:
        with self._lock:
            self._tasks.discard(task)

    async def aclose(self) -> None:
        await self.client.aclose()

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(self, *args) -> None:
        await self.aclose()
