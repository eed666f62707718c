"""
Outcome type and the mapping of envelopes and upstream errors onto it.

``capture`` is the single place where decode errors, transport errors and
application failures become one ``Failure`` shape.
"""
from dataclasses import dataclass
from typing import Awaitable, Callable, Generic, Optional, TypeVar, Union

from ..exceptions import ApplicationError, PgyerException
from ..logging import get_logger
from .models import Envelope

T = TypeVar('T')

_logger = get_logger('pgyerpy.result')


@dataclass(frozen=True)
class Success(Generic[T]):
    """Successful outcome carrying a value."""
    value: T
    
    @property
    def is_success(self) -> bool:
        return True
    
    @property
    def is_failure(self) -> bool:
        return False
    
    def unwrap(self) -> T:
        return self.value


@dataclass(frozen=True)
class Failure:
    """
    Failed outcome.
    
    Attributes:
        cause: Description shown to the user
        error: Exception the failure was built from, if any
    """
    cause: str
    error: Optional[BaseException] = None
    
    @property
    def is_success(self) -> bool:
        return False
    
    @property
    def is_failure(self) -> bool:
        return True
    
    def unwrap(self):
        """Raise the carried error (or a generic PgyerException)."""
        if self.error is not None:
            raise self.error
        raise PgyerException(self.cause)


Outcome = Union[Success[T], Failure]


def to_outcome(envelope: Envelope[T]) -> 'Outcome[T]':
    """Map an envelope to Success iff its code is 200 or 204."""
    if envelope.is_successful:
        return Success(envelope.data)
    error = ApplicationError(envelope.code, envelope.message)
    return Failure(str(error), error)


def describe(error: BaseException) -> str:
    """Human readable description of an upstream error."""
    text = str(error)
    if isinstance(error, PgyerException):
        return text or type(error).__name__
    return f"{type(error).__name__}: {text}" if text else type(error).__name__


async def capture(call: Union[Awaitable[Envelope[T]], Callable[[], Awaitable[Envelope[T]]]]) -> 'Outcome[T]':
    """
    Await an envelope-producing call and map it to an outcome.
    
    Every ``Exception`` raised by the call becomes a ``Failure``.
    ``asyncio.CancelledError`` is a ``BaseException`` and keeps propagating.
    """
    try:
        envelope = await (call() if callable(call) else call)
    except Exception as e:
        _logger.debug(f"Request failed: {describe(e)}")
        return Failure(describe(e), e)
    return to_outcome(envelope)
