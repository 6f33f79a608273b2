from __future__ import annotations

from typing import TYPE_CHECKING, AsyncIterator, Protocol

if TYPE_CHECKING:
    from ..runtime.cancellation import ShutdownToken


class LineStream(Protocol):
    """One live attempt of a line-producing source."""

    def lines(self, token: "ShutdownToken") -> AsyncIterator[str]: ...

    async def terminate(self) -> None: ...


class LineSource(Protocol):
    """Restartable factory of line streams; ``spawn`` raises ``LogStreamError``."""

    async def spawn(self) -> LineStream: ...
