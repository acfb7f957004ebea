"""Request-scoped access to the components held on ``app.state``."""

from fastapi import Request

from wsrecall.pipeline.context import AppContext


def get_context(request: Request) -> AppContext:
    return request.app.state.context
