'''
Shared fixtures: a synchronous in-memory adapter whose tasks are completed
by hand, and a configurable request type.
'''
import dataclasses as dc
from collections.abc import Callable
from typing import Any

import httpx
import pytest

import reqkit


@dc.dataclass(frozen=True)
class SampleRequest(reqkit.Request[Any]):
    base_url: str = 'https://example.com'
    path: str = '/'
    method: str = 'GET'
    parameters: Any = dc.field(default_factory=dict)
    header_fields: dict[str, str] = dc.field(default_factory=dict)
    intercept_hook: Callable[[httpx.Request], Any] = lambda request: request

    def intercept(self, wire_request: httpx.Request) -> httpx.Request:
        return self.intercept_hook(wire_request)

    def response_from(self, obj: Any, response: httpx.Response) -> Any:
        return obj


@dc.dataclass(frozen=True)
class OtherRequest(SampleRequest):
    pass


@dc.dataclass(frozen=True)
class UnrelatedRequest(reqkit.Request[str]):
    base_url: str = 'https://example.org'
    data_parser: reqkit.DataParser = reqkit.StringDataParser()

    def response_from(self, obj: Any, response: httpx.Response) -> str:
        return obj


class FakeTask:
    def __init__(self, wire_request: httpx.Request, handler) -> None:
        self.wire_request = wire_request
        self.handler = handler
        self.resume_count = 0
        self.cancelled = False
        self.completed = False

    def resume(self) -> None:
        self.resume_count += 1

    def cancel(self) -> None:
        if self.completed:
            return
        self.cancelled = True
        self.complete(None, None, reqkit.TaskCancelledError())

    def complete(self, data, response, error) -> None:
        if self.completed:
            return
        self.completed = True
        self.handler(data, response, error)

    def respond(self, status_code: int = 200, content: bytes = b'{}') -> None:
        response = httpx.Response(status_code, content=content, request=self.wire_request)
        self.complete(content, response, None)


class FakeAdapter:
    def __init__(self) -> None:
        self.tasks: list[FakeTask] = []

    def create_task(self, wire_request: httpx.Request, handler) -> FakeTask:
        task = FakeTask(wire_request, handler)
        self.tasks.append(task)
        return task

    def get_tasks(self, handler) -> None:
        handler([task for task in self.tasks if not task.completed])


class ResultRecorder:
    def __init__(self) -> None:
        self.results: list[reqkit.Result[Any]] = []

    def __call__(self, result: reqkit.Result[Any]) -> None:
        self.results.append(result)

    @property
    def only(self) -> reqkit.Result[Any]:
        assert len(self.results) == 1
        return self.results[0]


@pytest.fixture
def adapter() -> FakeAdapter:
    return FakeAdapter()


@pytest.fixture
def session(adapter: FakeAdapter) -> reqkit.Session:
    return reqkit.Session(adapter, callback_queue=reqkit.CurrentQueue())


@pytest.fixture
def recorder() -> ResultRecorder:
    return ResultRecorder()
