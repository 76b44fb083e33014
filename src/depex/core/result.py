"""
Ok/Err results for operations whose failure is an expected outcome.

GraphEngine.expand reports a failed fetch as Err(FetchError) instead of
raising, so one node of a concurrent batch can fail without taking the
others down. Unwrapping an Err re-raises the exception it carries.
"""

from dataclasses import dataclass
from typing import Callable, Dict, Generic, Iterable, Sequence, Tuple, TypeVar, Union

T = TypeVar("T")
E = TypeVar("E")
U = TypeVar("U")
K = TypeVar("K")


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T

    def is_ok(self) -> bool:
        return True

    def is_err(self) -> bool:
        return False

    def unwrap(self) -> T:
        return self.value

    def unwrap_or(self, default: T) -> T:
        return self.value


@dataclass(frozen=True)
class Err(Generic[E]):
    error: E

    def is_ok(self) -> bool:
        return False

    def is_err(self) -> bool:
        return True

    def unwrap(self):
        if isinstance(self.error, BaseException):
            raise self.error
        raise ValueError(f"Called unwrap on Err: {self.error}")

    def unwrap_or(self, default):
        return default


Result = Union[Ok[T], Err[E]]


def map_ok(result: Result[T, E], func: Callable[[T], U]) -> Result[U, E]:
    """Apply func to the value of an Ok; an Err passes through untouched."""
    if isinstance(result, Ok):
        return Ok(func(result.value))
    return result


def split_results(keys: Sequence[K], results: Iterable[Result[T, E]]) -> Tuple[Dict[K, T], Dict[K, E]]:
    """
    Pair keys with results positionally and separate the two outcomes.

    Returns:
        (values, errors): Ok values and Err errors, each keyed by their key.
    """
    values: Dict[K, T] = {}
    errors: Dict[K, E] = {}
    for key, result in zip(keys, results):
        if isinstance(result, Ok):
            values[key] = result.value
        else:
            errors[key] = result.error
    return values, errors
