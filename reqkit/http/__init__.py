'''
**reqkit.http**
---------

The backend side of reqkit: the `SessionAdapter`/`SessionTask` protocols a
`Session` talks to, the default httpx backed adapter, and the client
configuration used to build it.
'''
from reqkit.http._adapter import (
    CompletionHandler,
    HttpxAdapter,
    HttpxSessionTask,
    SessionAdapter,
    SessionTask,
    TaskState,
)
from reqkit.http._client import (
    ClientConfig,
    ReqkitClient,
    log_request,
    log_response,
)

__all__ = [
    'CompletionHandler',
    'HttpxAdapter',
    'HttpxSessionTask',
    'SessionAdapter',
    'SessionTask',
    'TaskState',
    'ClientConfig',
    'ReqkitClient',
    'log_request',
    'log_response',
]
