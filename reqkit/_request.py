'''
**reqkit._request**

The typed `Request` value. A request describes one HTTP call and knows
how to turn itself into an `httpx.Request` and how to turn the bytes and
`httpx.Response` it gets back into a typed response.

Subclass it, usually as a frozen dataclass:

    @dc.dataclass(frozen=True)
    class GetUser(Request[User]):
        login: str
        base_url: str = 'https://api.github.com'

        @property
        def path(self) -> str:
            return f'/users/{self.login}'

        def response_from(self, obj, response) -> User:
            return User(**obj)
'''
import abc
import logging
from collections.abc import Mapping
from http import HTTPMethod
from typing import Any, Generic, TypeVar

import httpx

from reqkit._errors import (
    InvalidBaseURLError,
    UnacceptableStatusCodeError,
    UnexpectedWireRequestError,
)
from reqkit._parameters import BodyParameters, DataParser, JSONBodyParameters, JSONDataParser

logger = logging.getLogger(__name__)

T = TypeVar('T')

_QUERY_METHODS = frozenset({HTTPMethod.GET, HTTPMethod.HEAD, HTTPMethod.DELETE})


def prefers_query_parameters(method: HTTPMethod) -> bool:
    return method in _QUERY_METHODS


def to_http_method(method: HTTPMethod | str) -> HTTPMethod:
    '''
    Raises
    ------
    ValueError
        If the method is not a known HTTP method.
    '''
    if isinstance(method, HTTPMethod):
        return method
    return HTTPMethod(str(method).upper())


def join_url(base_url: str, path: str) -> httpx.URL:
    '''
    Appends `path` as a path component to `base_url`.

    Parameters
    ----------
    base_url : str
        An absolute http(s) URL.
    path : str

    Returns
    -------
    httpx.URL

    Raises
    ------
    InvalidBaseURLError
        If the base URL is malformed, relative, not http(s) or the
        joined URL cannot be built.
    '''
    try:
        base = httpx.URL(base_url)
    except (httpx.InvalidURL, TypeError) as exc:
        raise InvalidBaseURLError(base_url) from exc

    if base.scheme not in ('http', 'https') or not base.host:
        raise InvalidBaseURLError(base_url, 'base url must be an absolute http(s) url')

    if not path:
        return base

    joined = base.path.rstrip('/') + '/' + path.lstrip('/')
    try:
        return base.copy_with(path=joined)
    except httpx.InvalidURL as exc:
        raise InvalidBaseURLError(f'{base_url}{path}', 'invalid path') from exc


class Request(abc.ABC, Generic[T]):
    '''
    A typed description of one HTTP call whose parsed response is `T`.
    '''
    base_url: str
    method: HTTPMethod | str = HTTPMethod.GET
    path: str = ''
    parameters: Any = None
    header_fields: Mapping[str, str] | None = None
    data_parser: DataParser = JSONDataParser()

    def get_query_parameters(self) -> Mapping[str, Any] | None:
        if not isinstance(self.parameters, Mapping):
            return None
        if not prefers_query_parameters(to_http_method(self.method)):
            return None
        return self.parameters

    def get_body_parameters(self) -> BodyParameters | None:
        if self.parameters is None:
            return None
        if prefers_query_parameters(to_http_method(self.method)):
            return None
        return JSONBodyParameters(self.parameters)

    def build_wire_request(self) -> httpx.Request:
        '''
        Builds the `httpx.Request` sent over the wire and
        runs it through `intercept`.

        Returns
        -------
        httpx.Request

        Raises
        ------
        InvalidBaseURLError
        UnexpectedWireRequestError
            If `intercept` does not return an `httpx.Request`.
        '''
        url = join_url(self.base_url, self.path)
        method = to_http_method(self.method)

        headers = httpx.Headers()
        entity: dict[str, Any] = {}
        if body := self.get_body_parameters():
            headers['Content-Type'] = body.content_type
            entity = body.build_entity()

        if accept := self.data_parser.content_type:
            headers['Accept'] = accept

        headers.update(self.header_fields or {})

        wire_request = httpx.Request(
            method.value,
            url,
            params=self.get_query_parameters() or None,
            headers=headers,
            **entity,
        )
        intercepted = self.intercept(wire_request)
        if not isinstance(intercepted, httpx.Request):
            raise UnexpectedWireRequestError(intercepted)

        return intercepted

    def intercept(self, wire_request: httpx.Request) -> httpx.Request:
        '''
        Last chance to mutate the wire request before it is
        dispatched (signing, extra headers...). Identity by default.
        '''
        return wire_request

    def parse(self, data: bytes, response: httpx.Response) -> T:
        obj = self.data_parser.parse(data)
        obj = self.intercept_object(obj, response)
        return self.response_from(obj, response)

    def intercept_object(self, obj: Any, response: httpx.Response) -> Any:
        '''
        Validates the parsed object against the response metadata.
        Rejects any status code outside of 2xx by default.

        Raises
        ------
        UnacceptableStatusCodeError
        '''
        if not 200 <= response.status_code < 300:
            raise UnacceptableStatusCodeError(response.status_code)
        return obj

    @abc.abstractmethod
    def response_from(self, obj: Any, response: httpx.Response) -> T:
        ...
