import dataclasses as dc
import logging

import httpx

from reqkit._version import __version__

logger = logging.getLogger(__name__)


def _base_limits() -> httpx.Limits:
    return httpx.Limits(
        max_connections=100,
        max_keepalive_connections=20,
        keepalive_expiry=15,
    )


def _base_timeouts() -> httpx.Timeout:
    return httpx.Timeout(
        connect=5.0,
        read=10.0,
        write=10.0,
        pool=5.0,
    )


def _default_headers(user_agent: str) -> dict[str, str]:
    return {
        'User-Agent': user_agent,
        'Accept-Language': 'en-US,en;q=0.9',
    }


async def log_request(request: httpx.Request) -> None:
    logger.debug(f'Sending request: {request.method} {request.url}')


async def log_response(response: httpx.Response) -> None:
    request = response.request
    logger.debug(f'Received {response.status_code} for {request.method} {request.url}')


@dc.dataclass(slots=True)
class ClientConfig:
    '''
    Configuration options for the httpx client backing a session.
    Good defaults are provided for most use cases.
    '''
    timeout: httpx.Timeout = dc.field(default_factory=_base_timeouts)
    limits: httpx.Limits = dc.field(default_factory=_base_limits)
    http2: bool = True
    follow_redirects: bool = True
    trust_env: bool = False
    retries: int = 0
    user_agent: str = f'reqkit/{__version__}'


class ReqkitClient(httpx.AsyncClient):
    '''
    Thin wrapper around httpx.AsyncClient built from a `ClientConfig`
    with request/response logging hooks installed.
    '''

    def __init__(
        self,
        base_url: str | None = None,
        *,
        auth: httpx.Auth | None = None,
        headers: dict[str, str] | None = None,
        config: ClientConfig | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._config: ClientConfig = config or ClientConfig()

        if transport is None:
            transport = httpx.AsyncHTTPTransport(
                http2=self._config.http2,
                trust_env=self._config.trust_env,
                retries=self._config.retries,
            )

        all_headers = _default_headers(self._config.user_agent)
        if headers:
            all_headers.update(headers)

        super().__init__(
            base_url=base_url or '',
            transport=transport,
            auth=auth,
            limits=self._config.limits,
            timeout=self._config.timeout,
            headers=all_headers,
            follow_redirects=self._config.follow_redirects,
            trust_env=self._config.trust_env,
            event_hooks={
                'request': [log_request],
                'response': [log_response],
            },
        )

    @property
    def config(self) -> ClientConfig:
        return self._config
