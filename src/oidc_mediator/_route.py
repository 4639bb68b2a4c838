from collections.abc import Awaitable, Callable
from typing import Any

from fastapi import Request, Response

from ._context import Context

ALL_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]


class Route:
    def __init__(
        self,
        path: str,
        methods: list[str],
        function: Callable[[Request, Context], Awaitable[Response]],
        summary: str | None = None,
        operation_id: str | None = None,
    ):
        self.path = path
        self.methods = methods
        self.function = function
        self.summary = summary
        self.operation_id = operation_id

    def to_fastapi_endpoint(self, context: Context) -> Callable[..., Any]:
        async def wrapper(request: Request) -> Response:
            return await self.function(request, context)

        return wrapper
