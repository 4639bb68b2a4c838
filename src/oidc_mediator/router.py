import logging

from fastapi import APIRouter, FastAPI

from ._callback import CallbackServer
from ._config import MediatorConfig
from ._context import Context

logger = logging.getLogger(__name__)


class MediatorRouter(APIRouter):
    _context: Context

    def __init__(self, config: MediatorConfig, context: Context | None = None):
        super().__init__()

        self._context = context or Context(config)
        self.callback_server = CallbackServer()

        for route in self.callback_server.routes:
            self.add_api_route(
                route.path,
                route.to_fastapi_endpoint(self._context),
                methods=route.methods,
                operation_id=route.operation_id,
                summary=route.summary,
                include_in_schema=False,
            )

    @property
    def context(self) -> Context:
        return self._context


def create_app(config: MediatorConfig, context: Context | None = None) -> FastAPI:
    app = FastAPI(
        title="oidc-mediator", docs_url=None, redoc_url=None, openapi_url=None
    )
    router = MediatorRouter(config, context=context)

    app.include_router(router)
    app.state.context = router.context

    return app
