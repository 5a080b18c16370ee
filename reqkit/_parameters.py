'''
**reqkit._parameters**

Strategies describing how a request's `parameters` become an HTTP body and
how response bytes become a Python object. Encoding the body itself is left
to httpx; a body strategy only returns the keyword arguments
`httpx.Request` should be built with.
'''
import json
from collections.abc import Mapping
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class BodyParameters(Protocol):
    content_type: str

    def build_entity(self) -> dict[str, Any]:
        ...


@runtime_checkable
class DataParser(Protocol):
    content_type: str | None

    def parse(self, data: bytes) -> Any:
        ...


class JSONBodyParameters:
    content_type = 'application/json'

    def __init__(self, obj: Any) -> None:
        self.obj = obj

    def build_entity(self) -> dict[str, Any]:
        return {'json': self.obj}


class FormURLEncodedBodyParameters:
    content_type = 'application/x-www-form-urlencoded'

    def __init__(self, form: Mapping[str, Any]) -> None:
        self.form = form

    def build_entity(self) -> dict[str, Any]:
        return {'data': dict(self.form)}


class RawBodyParameters:
    def __init__(
        self,
        content: bytes,
        content_type: str = 'application/octet-stream',
    ) -> None:
        self.content = content
        self.content_type = content_type

    def build_entity(self) -> dict[str, Any]:
        return {'content': self.content}


class JSONDataParser:
    content_type = 'application/json'

    def parse(self, data: bytes) -> Any:
        '''
        Parses the response body as JSON. An empty body
        parses to an empty dict (e.g. 204 responses).

        Raises
        ------
        json.JSONDecodeError
        '''
        if not data:
            return {}
        return json.loads(data)


class StringDataParser:
    content_type = None

    def __init__(self, encoding: str = 'utf-8') -> None:
        self.encoding = encoding

    def parse(self, data: bytes) -> str:
        return data.decode(self.encoding)


class RawDataParser:
    content_type = None

    def parse(self, data: bytes) -> bytes:
        return data
