from fastapi import Request

from .services.downtime_service import DowntimeService
from .services.sweep_service import ReconciliationSweeper


def get_downtime_service(request: Request) -> DowntimeService:
    return request.app.state.downtime_service


def get_sweeper(request: Request) -> ReconciliationSweeper:
    return request.app.state.sweeper
