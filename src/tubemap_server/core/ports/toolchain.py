from collections.abc import Sequence
from typing import Protocol

from tubemap_server.errors import ToolInvocationError


class GraphToolchain(Protocol):
    def available(self) -> bool: ...

    async def run(
        self,
        args: Sequence[str],
        *,
        request_id: str = "-",
        error: type[ToolInvocationError] = ToolInvocationError,
    ) -> bytes: ...

    async def pipe(
        self,
        producer_args: Sequence[str],
        consumer_args: Sequence[str],
        *,
        request_id: str = "-",
    ) -> bytes: ...
