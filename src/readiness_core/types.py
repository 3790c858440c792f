from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Generic, TypeVar, Union

T = TypeVar("T")


@dataclass(frozen=True)
class Success(Generic[T]):
    value: T


@dataclass(frozen=True)
class Failure:
    error: BaseException


# What a single probe attempt may signal explicitly
Outcome = Union[Success[T], Failure]

# A probe may be sync or async and may return an Outcome or a plain value
Probe = Callable[..., Union[Any, Awaitable[Any]]]

# Called before each attempt (e.g., refresh a connection, count attempts)
PreAttemptFn = Callable[[], Awaitable[None]]

# Decide if a probe failure is transient (should retry)
TransientClassifier = Callable[[BaseException], bool]
