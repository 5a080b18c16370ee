import asyncio
import threading

import httpx
import pytest

import reqkit
from reqkit.http import ClientConfig, HttpxAdapter, ReqkitClient, TaskState
from conftest import SampleRequest


class Outcome:
    def __init__(self) -> None:
        self.calls: list[tuple] = []
        self.done = asyncio.Event()

    def __call__(self, data, response, error) -> None:
        self.calls.append((data, response, error))
        self.done.set()

    async def wait(self) -> tuple:
        await asyncio.wait_for(self.done.wait(), timeout=1)
        return self.calls[0]


def _users_handler(request: httpx.Request) -> httpx.Response:
    if request.url.path == '/users':
        return httpx.Response(200, json=[{'login': 'octocat'}])
    return httpx.Response(404, json={'message': 'Not Found'})


def _adapter(handler) -> HttpxAdapter:
    return HttpxAdapter.from_config(transport=httpx.MockTransport(handler))


def _stalled_transport() -> httpx.MockTransport:
    async def stall(request: httpx.Request) -> httpx.Response:
        await asyncio.Event().wait()
        raise AssertionError('unreachable')

    return httpx.MockTransport(stall)


async def test_reports_body_and_response() -> None:
    adapter = _adapter(_users_handler)
    outcome = Outcome()
    task = adapter.create_task(httpx.Request('GET', 'https://example.com/users'), outcome)
    assert task.state is TaskState.CREATED

    task.resume()
    assert task.state is TaskState.RUNNING
    data, response, error = await outcome.wait()

    assert error is None
    assert isinstance(response, httpx.Response)
    assert response.status_code == 200
    assert data == response.content
    assert task.state is TaskState.COMPLETED
    await adapter.aclose()


async def test_error_status_is_not_a_transport_error() -> None:
    adapter = _adapter(_users_handler)
    outcome = Outcome()
    adapter.create_task(httpx.Request('GET', 'https://example.com/nope'), outcome).resume()

    data, response, error = await outcome.wait()
    assert error is None
    assert response.status_code == 404
    await adapter.aclose()


async def test_transport_error_is_reported() -> None:
    def timeout(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectTimeout('timed out', request=request)

    adapter = _adapter(timeout)
    outcome = Outcome()
    adapter.create_task(httpx.Request('GET', 'https://example.com/'), outcome).resume()

    data, response, error = await outcome.wait()
    assert data is None
    assert response is None
    assert isinstance(error, httpx.ConnectTimeout)
    await adapter.aclose()


async def test_cancel_in_flight() -> None:
    adapter = HttpxAdapter.from_config(transport=_stalled_transport())
    outcome = Outcome()
    task = adapter.create_task(httpx.Request('GET', 'https://example.com/'), outcome)
    task.resume()
    await asyncio.sleep(0)

    task.cancel()
    data, response, error = await outcome.wait()
    await asyncio.sleep(0)

    assert isinstance(error, reqkit.TaskCancelledError)
    assert task.state is TaskState.CANCELLED
    assert len(outcome.calls) == 1
    await adapter.aclose()


async def test_cancel_before_resume_and_after_completion() -> None:
    adapter = _adapter(_users_handler)

    cancelled = Outcome()
    task = adapter.create_task(httpx.Request('GET', 'https://example.com/users'), cancelled)
    task.cancel()
    task.resume()
    assert task.state is TaskState.CANCELLED

    completed = Outcome()
    other = adapter.create_task(httpx.Request('GET', 'https://example.com/users'), completed)
    other.resume()
    await completed.wait()
    other.cancel()
    other.resume()
    await asyncio.sleep(0)

    assert len(cancelled.calls) == 1
    assert len(completed.calls) == 1
    assert other.state is TaskState.COMPLETED
    await adapter.aclose()


async def test_get_tasks_lists_live_tasks() -> None:
    adapter = HttpxAdapter.from_config(transport=_stalled_transport())
    first = adapter.create_task(httpx.Request('GET', 'https://example.com/1'), Outcome())
    second = adapter.create_task(httpx.Request('GET', 'https://example.com/2'), Outcome())

    seen: list = []
    adapter.get_tasks(seen.extend)
    assert set(seen) == {first, second}

    first.cancel()
    seen.clear()
    adapter.get_tasks(seen.extend)
    assert seen == [second]

    second.cancel()
    await adapter.aclose()


def test_resume_without_loop_reports_error() -> None:
    adapter = _adapter(_users_handler)
    calls = []
    task = adapter.create_task(
        httpx.Request('GET', 'https://example.com/users'),
        lambda *outcome: calls.append(outcome),
    )
    task.resume()

    assert len(calls) == 1
    assert isinstance(calls[0][2], RuntimeError)
    assert task.state is TaskState.COMPLETED


async def test_resume_from_another_thread_runs_on_configured_loop() -> None:
    loop = asyncio.get_running_loop()
    adapter = HttpxAdapter(
        ReqkitClient(transport=httpx.MockTransport(_users_handler)),
        loop=loop,
    )
    outcome = Outcome()
    task = adapter.create_task(httpx.Request('GET', 'https://example.com/users'), outcome)

    thread = threading.Thread(target=task.resume)
    thread.start()
    await asyncio.to_thread(thread.join)

    data, response, error = await outcome.wait()
    assert response.status_code == 200
    await adapter.aclose()


def test_client_config_defaults() -> None:
    config = ClientConfig()
    assert config.follow_redirects is True
    assert config.timeout.connect == 5.0
    assert config.user_agent == f'reqkit/{reqkit.__version__}'

    client = ReqkitClient(config=config, headers={'X-Api-Key': 'k'}, transport=httpx.MockTransport(_users_handler))
    assert client.headers['User-Agent'] == config.user_agent
    assert client.headers['X-Api-Key'] == 'k'
    assert client.config is config


class TestSessionOverHttpx:

    async def test_response(self) -> None:
        async with reqkit.Session(_adapter(_users_handler)) as session:
            users = await session.response(SampleRequest(path='/users'))
        assert users == [{'login': 'octocat'}]

    async def test_unacceptable_status(self) -> None:
        async with reqkit.Session(_adapter(_users_handler)) as session:
            with pytest.raises(reqkit.ResponseError) as exc_info:
                await session.response(SampleRequest(path='/missing'))
        assert exc_info.value.error.status_code == 404

    async def test_request_reaches_transport(self) -> None:
        seen: list[httpx.Request] = []

        def record(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(201, json={'id': 1})

        async with reqkit.Session(_adapter(record)) as session:
            created = await session.response(
                SampleRequest(method='POST', path='/repos', parameters={'name': 'reqkit'})
            )

        assert created == {'id': 1}
        assert seen[0].method == 'POST'
        assert seen[0].url.path == '/repos'
        assert seen[0].headers['Content-Type'] == 'application/json'
        assert seen[0].headers['User-Agent'] == f'reqkit/{reqkit.__version__}'

    async def test_cancel_requests(self) -> None:
        async with reqkit.Session(HttpxAdapter.from_config(transport=_stalled_transport())) as session:
            pending = asyncio.create_task(session.response(SampleRequest(path='/slow')))
            await asyncio.sleep(0.01)

            session.cancel_requests(SampleRequest)

            with pytest.raises(reqkit.SessionConnectionError) as exc_info:
                await asyncio.wait_for(pending, timeout=1)
        assert isinstance(exc_info.value.error, reqkit.TaskCancelledError)


def test_create_default_session() -> None:
    session = reqkit.create_default_session(headers={'Accept-Language': 'fr'})
    assert isinstance(session.adapter, HttpxAdapter)
    assert isinstance(session.callback_queue, reqkit.LoopQueue)
    assert session.adapter.client.headers['Accept-Language'] == 'fr'


async def test_send_and_cancel_from_worker_thread() -> None:
    loop = asyncio.get_running_loop()
    adapter = HttpxAdapter(ReqkitClient(transport=_stalled_transport()), loop=loop)
    results: list[tuple] = []
    delivered = asyncio.Event()

    def handler(result) -> None:
        results.append((result, threading.get_ident()))
        delivered.set()

    def worker() -> None:
        session = reqkit.Session(adapter)
        assert session.callback_queue.loop is loop
        session.send(SampleRequest(), handler=handler)
        session.cancel_requests(SampleRequest)

    await asyncio.to_thread(worker)
    await asyncio.wait_for(delivered.wait(), timeout=1)
    await asyncio.sleep(0)

    assert len(results) == 1
    result, thread_id = results[0]
    assert isinstance(result.error, reqkit.SessionConnectionError)
    assert isinstance(result.error.error, reqkit.TaskCancelledError)
    assert thread_id == threading.get_ident()

    live: list = []
    adapter.get_tasks(live.extend)
    assert live == []
    await adapter.aclose()


def test_raising_handler_does_not_escape_task() -> None:
    adapter = _adapter(_users_handler)

    def explode(data, response, error) -> None:
        raise ValueError('handler bug')

    task = adapter.create_task(httpx.Request('GET', 'https://example.com/users'), explode)
    task.resume()
    task.cancel()

    assert task.state is TaskState.COMPLETED


async def test_raising_handler_in_running_task_is_logged(caplog) -> None:
    adapter = _adapter(_users_handler)
    outcome = Outcome()

    def explode(data, response, error) -> None:
        outcome(data, response, error)
        raise ValueError('handler bug')

    task = adapter.create_task(httpx.Request('GET', 'https://example.com/users'), explode)
    with caplog.at_level('WARNING', logger='reqkit.http._adapter'):
        task.resume()
        await outcome.wait()
        await asyncio.sleep(0)

    assert task.state is TaskState.COMPLETED
    assert task._future.done()
    assert task._future.exception() is None
    assert 'handler bug' in caplog.text
    await adapter.aclose()
