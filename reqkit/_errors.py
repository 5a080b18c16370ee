'''
Error taxonomy for reqkit.

Every failure of a `Session.send` call is delivered to the handler as a
`SessionTaskError` subclass wrapping the underlying exception.
'''
from typing import Any


class SessionTaskError(Exception):
    '''
    Base error delivered through a `Failure` result.

    Parent: Exception
    '''

    def __init__(self, error: BaseException) -> None:
        super().__init__(error)
        self.error: BaseException = error

    def __repr__(self) -> str:
        return f'{type(self).__name__}({self.error!r})'


class RequestError(SessionTaskError):
    '''
    Building the wire request failed, nothing was sent.
    '''


class SessionConnectionError(SessionTaskError):
    '''
    The backend adapter reported a transport level failure.
    '''


class ResponseError(SessionTaskError):
    '''
    The response could not be turned into the typed response.
    '''


class InvalidBaseURLError(ValueError):
    '''
    Raised when a request's base URL (or base URL + path) is not
    an absolute http(s) URL.

    Parent: ValueError
    '''

    def __init__(self, base_url: str, reason: str = 'invalid base url') -> None:
        super().__init__(f'{reason}: {base_url!r}')
        self.base_url = base_url


class UnexpectedWireRequestError(TypeError):
    '''
    Raised when `Request.intercept` hands back something
    that is not an `httpx.Request`.

    Parent: TypeError
    '''

    def __init__(self, wire_request: Any) -> None:
        super().__init__(
            f'intercept() must return httpx.Request, got {type(wire_request).__name__}'
        )
        self.wire_request = wire_request


class NonHTTPResponseError(ValueError):
    '''
    Parent: ValueError
    '''

    def __init__(self, response: Any) -> None:
        super().__init__(f'response is not an HTTP response: {response!r}')
        self.response = response


class UnacceptableStatusCodeError(ValueError):
    '''
    Parent: ValueError
    '''

    def __init__(self, status_code: int) -> None:
        super().__init__(f'unacceptable status code: {status_code}')
        self.status_code = status_code


class UnexpectedObjectError(TypeError):
    '''
    Raised by `Request.response_from` when the parsed object
    does not have the expected shape.

    Parent: TypeError
    '''

    def __init__(self, obj: Any) -> None:
        super().__init__(f'unexpected object: {obj!r}')
        self.obj = obj


class TaskCancelledError(Exception):
    '''
    Reported by the httpx adapter as the transport error of a cancelled task.
    '''

    def __init__(self, message: str = 'task was cancelled') -> None:
        super().__init__(message)
