import dataclasses as dc
from typing import Generic, NoReturn, TypeVar

from reqkit._errors import SessionTaskError

T = TypeVar('T')


@dc.dataclass(frozen=True, slots=True)
class Success(Generic[T]):
    value: T

    @property
    def ok(self) -> bool:
        return True

    def unwrap(self) -> T:
        return self.value


@dc.dataclass(frozen=True, slots=True)
class Failure:
    error: SessionTaskError

    @property
    def ok(self) -> bool:
        return False

    def unwrap(self) -> NoReturn:
        raise self.error


Result = Success[T] | Failure
