"""
Alpaca API — Server Info Route
===============================

What:  GET /{api_prefix}/version, the server name and API version.
Who:   Clients checking which server they talk to.
"""

from fastapi import APIRouter

from alpaca.config import settings
from alpaca.rest.endpoint_maker import make_path
from alpaca.schemas.responses import ServerInfo

router = APIRouter(tags=["Info"])


@router.get(
    make_path(settings.api_prefix, "version"),
    response_model=ServerInfo,
    summary="Server name and API version",
)
async def server_info() -> ServerInfo:
    return ServerInfo(version=settings.server_version, name=settings.server_name)
