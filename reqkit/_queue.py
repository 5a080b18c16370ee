'''
**reqkit._queue**

Where result handlers run. The backend adapter completes tasks on whatever
thread or loop it likes, the `Session` then hands the classified result to a
`CallbackQueue` which decides where the user's handler executes.
'''
import abc
import asyncio
import logging
from collections.abc import Callable
from concurrent.futures import Executor

logger = logging.getLogger(__name__)


class CallbackQueue(abc.ABC):

    @abc.abstractmethod
    def execute(self, fn: Callable[[], None]) -> None:
        ...

    @classmethod
    def main(cls, loop: asyncio.AbstractEventLoop | None = None) -> 'LoopQueue':
        return LoopQueue(loop)

    @classmethod
    def current(cls) -> 'CurrentQueue':
        return CurrentQueue()

    @classmethod
    def executor(cls, executor: Executor) -> 'ExecutorQueue':
        return ExecutorQueue(executor)


class LoopQueue(CallbackQueue):
    '''
    Schedules handlers on an asyncio event loop. Without an explicit
    loop the running loop of the calling thread is used, and with no
    loop at all the handler runs inline so it is never dropped.
    '''

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._loop = loop

    @property
    def loop(self) -> asyncio.AbstractEventLoop | None:
        return self._loop

    def execute(self, fn: Callable[[], None]) -> None:
        loop = self._loop or get_running_loop_or_none()
        if loop is None or loop.is_closed():
            logger.debug('No event loop to schedule on, running handler inline')
            fn()
            return
        loop.call_soon_threadsafe(fn)


def get_running_loop_or_none() -> asyncio.AbstractEventLoop | None:
    try:
        return asyncio.get_running_loop()
    except RuntimeError:
        return None


class CurrentQueue(CallbackQueue):
    '''
    Runs handlers inline on whichever thread completed the task.
    '''

    def execute(self, fn: Callable[[], None]) -> None:
        fn()


class ExecutorQueue(CallbackQueue):

    def __init__(self, executor: Executor) -> None:
        self._executor = executor

    def execute(self, fn: Callable[[], None]) -> None:
        self._executor.submit(fn)
