'''
**reqkit._session**

`Session` sends typed requests through a `SessionAdapter`. It builds the
wire request, dispatches it, classifies what the adapter reports back into a
`Success` or `Failure` and delivers that to the caller's handler on a
`CallbackQueue`. It also keeps a weak task -> request table so in-flight
requests can be cancelled by type.
'''
import asyncio
import logging
import weakref
from collections.abc import Callable
from typing import Any, Self, TypeVar

import httpx

from reqkit._errors import (
    NonHTTPResponseError,
    RequestError,
    ResponseError,
    SessionConnectionError,
)
from reqkit._queue import CallbackQueue, LoopQueue, get_running_loop_or_none
from reqkit._request import Request
from reqkit._result import Failure, Result, Success
from reqkit.http import ClientConfig, HttpxAdapter, SessionAdapter, SessionTask

logger = logging.getLogger(__name__)

T = TypeVar('T')
R = TypeVar('R', bound=Request)

ResultHandler = Callable[[Result[T]], None]


def _ignore_result(result: Result[Any]) -> None:
    pass


def classify_outcome(
    request: Request[T],
    data: bytes | None,
    response: object | None,
    error: BaseException | None,
) -> Result[T]:
    '''
    Maps what a backend adapter reported for a task into a result.

    - an error always wins and becomes a `SessionConnectionError`
    - bytes with an `httpx.Response` are parsed by the request, parse
      failures become a `ResponseError`
    - anything else is a `ResponseError` wrapping `NonHTTPResponseError`

    Parameters
    ----------
    request : Request[T]
    data : bytes | None
    response : object | None
    error : BaseException | None

    Returns
    -------
    Result[T]
    '''
    if error is not None:
        return Failure(SessionConnectionError(error))

    if data is not None and isinstance(response, httpx.Response):
        try:
            return Success(request.parse(data, response))
        except Exception as exc:
            return Failure(ResponseError(exc))

    return Failure(ResponseError(NonHTTPResponseError(response)))


class Session:
    '''
    Manages tasks for typed HTTP requests.

    Parameters
    ----------
    adapter : SessionAdapter
        Connects the session to the network backend.
    callback_queue : CallbackQueue | None, optional
        Default queue handlers run on, by default a `LoopQueue` bound to
        the loop running when the session is built, else to the adapter's
        `loop`.
    '''

    def __init__(
        self,
        adapter: SessionAdapter,
        callback_queue: CallbackQueue | None = None,
    ) -> None:
        self.adapter = adapter
        self.callback_queue: CallbackQueue = callback_queue or LoopQueue(
            get_running_loop_or_none() or getattr(adapter, 'loop', None)
        )
        self._requests: weakref.WeakKeyDictionary[SessionTask, Request] = (
            weakref.WeakKeyDictionary()
        )

    def send(
        self,
        request: Request[T],
        callback_queue: CallbackQueue | None = None,
        handler: ResultHandler[T] | None = None,
    ) -> SessionTask | None:
        '''
        Sends a request, its result is passed to `handler` exactly once
        on `callback_queue`.

        Parameters
        ----------
        request : Request[T]
            The request to send.
        callback_queue : CallbackQueue | None, optional
            Where the handler runs, by default the session's queue.
        handler : ResultHandler[T] | None, optional
            Receives `Success[T]` or `Failure`, by default a no-op.

        Returns
        -------
        SessionTask | None
            The resumed task, or None when the wire request
            could not be built.
        '''
        task = self.create_task(request, callback_queue, handler or _ignore_result)
        if task is not None:
            task.resume()
        return task

    def create_task(
        self,
        request: Request[T],
        callback_queue: CallbackQueue | None,
        handler: ResultHandler[T],
    ) -> SessionTask | None:
        queue = callback_queue or self.callback_queue

        try:
            wire_request = request.build_wire_request()
        except Exception as exc:
            logger.warning(f'Could not build {type(request).__name__}: {exc!r}')
            failure = Failure(RequestError(exc))
            queue.execute(lambda: handler(failure))
            return None

        task_ref: weakref.ref[SessionTask] | None = None

        def on_complete(
            data: bytes | None,
            response: object | None,
            error: BaseException | None,
        ) -> None:
            if task_ref is not None and (finished := task_ref()) is not None:
                self._requests.pop(finished, None)

            result = classify_outcome(request, data, response, error)
            logger.debug(
                f'{wire_request.method} {wire_request.url} finished: '
                f'{"success" if result.ok else repr(result.error)}'
            )
            queue.execute(lambda: handler(result))

        task = self.adapter.create_task(wire_request, on_complete)
        task_ref = weakref.ref(task)
        self._requests[task] = request

        logger.debug(f'Created task for {wire_request.method} {wire_request.url}')
        return task

    def request_for_task(self, task: SessionTask) -> Request | None:
        return self._requests.get(task)

    def cancel_requests(
        self,
        request_type: type[R],
        predicate: Callable[[R], bool] | None = None,
    ) -> None:
        '''
        Cancels in-flight requests of `request_type` that pass `predicate`.

        Parameters
        ----------
        request_type : type[R]
        predicate : Callable[[R], bool] | None, optional
            Extra filter on the request, by default every request matches.
        '''
        session_ref = weakref.ref(self)

        def cancel_matching(tasks: list[SessionTask]) -> None:
            session = session_ref()
            if session is None:
                return

            for task in tasks:
                request = session.request_for_task(task)
                if not isinstance(request, request_type):
                    continue
                if predicate is not None and not predicate(request):
                    continue
                logger.debug(f'Cancelling {type(request).__name__} task')
                task.cancel()

        self.adapter.get_tasks(cancel_matching)

    async def response(
        self,
        request: Request[T],
        callback_queue: CallbackQueue | None = None,
    ) -> T:
        '''
        Sends a request and waits for its typed response.
        Cancelling the awaiting coroutine cancels the task.

        Raises
        ------
        SessionTaskError
        '''
        loop = asyncio.get_running_loop()
        future: asyncio.Future[Result[T]] = loop.create_future()

        def settle(result: Result[T]) -> None:
            if not future.done():
                loop.call_soon_threadsafe(_set_result, future, result)

        task = self.send(request, callback_queue or LoopQueue(loop), settle)
        try:
            result = await future
        except asyncio.CancelledError:
            if task is not None:
                task.cancel()
            raise

        return result.unwrap()

    async def aclose(self) -> None:
        aclose = getattr(self.adapter, 'aclose', None)
        if aclose is not None:
            await aclose()

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(self, *args) -> None:
        await self.aclose()


def _set_result(future: asyncio.Future, result: Result[Any]) -> None:
    if not future.done():
        future.set_result(result)


def create_default_session(
    config: ClientConfig | None = None,
    *,
    headers: dict[str, str] | None = None,
    callback_queue: CallbackQueue | None = None,
) -> Session:
    '''
    Builds a session over an `HttpxAdapter`. Construct it once at
    startup and pass it to whatever needs to send requests.
    '''
    adapter = HttpxAdapter.from_config(config, headers=headers)
    return Session(adapter, callback_queue)
