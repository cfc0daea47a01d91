"""Request dependencies resolving the services built in create_app()."""
from fastapi import Request

from ..services.dispatcher import CheckDispatcher
from ..services.on_call import OnCallService


def get_dispatcher(request: Request) -> CheckDispatcher:
    return request.app.state.dispatcher


def get_on_call_service(request: Request) -> OnCallService:
    return request.app.state.on_call_service
