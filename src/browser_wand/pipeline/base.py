"""Base protocol for pipeline handlers."""

from typing import Protocol, TypeVar

from browser_wand.core.exceptions import BrowserWandError
from browser_wand.core.types import Result

T_In = TypeVar("T_In", contravariant=True)
T_Out = TypeVar("T_Out")
T_Error = TypeVar("T_Error", bound=BrowserWandError)


class BaseAsyncHandler(Protocol[T_In, T_Out, T_Error]):
    """Protocol for asynchronous pipeline handlers.

    A handler performs one job on its input and reports the outcome as a
    `Result` instead of raising.
    """

    async def handle(self, command: T_In) -> Result[T_Out, T_Error]: ...
