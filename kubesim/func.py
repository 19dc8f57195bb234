"""
Small functional helpers shared across the simulator
"""

from typing import Any, Callable, Generic, NoReturn, Optional, TypeVar, cast

from typing_extensions import Self

T = TypeVar("T")


def assert_never(v: Any) -> NoReturn:
    """For exhaustive enum checks etc"""
    raise TypeError(v)


class Either(Generic[T]):
    """Lazy gathering of errors during validation. Errors are kept as a list of messages"""

    def __init__(self, t: Optional[T] = None, e: Optional[list[str]] = None):
        self.t = t
        self.e = e

    @classmethod
    def ok(cls, t: T) -> Self:
        return cls(t=t)

    @classmethod
    def error(cls, e: str | list[str]) -> Self:
        return cls(e=[e] if isinstance(e, str) else e)

    def get_or_raise(self, raiser: Optional[Callable[[str], BaseException]] = None) -> T:
        if self.e:
            message = "; ".join(self.e)
            if not raiser:
                raise ValueError(message)
            else:
                raise raiser(message)
        else:
            return cast(T, self.t)

    def append(self, other: Optional[str]) -> Self:
        if other:
            if not self.e:
                return self.error(other)
            else:
                return self.error(self.e + [other])
        else:
            return self
