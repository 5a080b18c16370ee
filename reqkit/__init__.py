'''
**reqkit**
---------

Typed HTTP requests over httpx. Describe a call as a `Request[T]` value,
send it through a `Session` and receive a `Success[T]` or `Failure` on the
callback queue of your choice.

    session = reqkit.create_default_session()
    user = await session.response(GetUser(login='octocat'))
'''
from reqkit._version import __version__
from reqkit._errors import (
    InvalidBaseURLError,
    NonHTTPResponseError,
    RequestError,
    ResponseError,
    SessionConnectionError,
    SessionTaskError,
    TaskCancelledError,
    UnacceptableStatusCodeError,
    UnexpectedObjectError,
    UnexpectedWireRequestError,
)
from reqkit._parameters import (
    BodyParameters,
    DataParser,
    FormURLEncodedBodyParameters,
    JSONBodyParameters,
    JSONDataParser,
    RawBodyParameters,
    RawDataParser,
    StringDataParser,
)
from reqkit._queue import CallbackQueue, CurrentQueue, ExecutorQueue, LoopQueue
from reqkit._request import HTTPMethod, Request
from reqkit._result import Failure, Result, Success
from reqkit._session import Session, classify_outcome, create_default_session
from reqkit.http import ClientConfig, HttpxAdapter, SessionAdapter, SessionTask

__all__ = [
    '__version__',
    'InvalidBaseURLError',
    'NonHTTPResponseError',
    'RequestError',
    'ResponseError',
    'SessionConnectionError',
    'SessionTaskError',
    'TaskCancelledError',
    'UnacceptableStatusCodeError',
    'UnexpectedObjectError',
    'UnexpectedWireRequestError',
    'BodyParameters',
    'DataParser',
    'FormURLEncodedBodyParameters',
    'JSONBodyParameters',
    'JSONDataParser',
    'RawBodyParameters',
    'RawDataParser',
    'StringDataParser',
    'CallbackQueue',
    'CurrentQueue',
    'ExecutorQueue',
    'LoopQueue',
    'HTTPMethod',
    'Request',
    'Failure',
    'Result',
    'Success',
    'Session',
    'classify_outcome',
    'create_default_session',
    'ClientConfig',
    'HttpxAdapter',
    'SessionAdapter',
    'SessionTask',
]
