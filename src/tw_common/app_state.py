"""FastAPI dependencies for process-level objects created in the lifespan.

main.lifespan stores them on ``app.state``:
    app.state.hub               NotificationHub
    app.state.settlement_queue  SettlementQueue
"""

from typing import TYPE_CHECKING

from fastapi import Request

if TYPE_CHECKING:
    from src.tw_realtime.domain.hub import NotificationHub
    from src.tw_settlement.infrastructure.queue import SettlementQueue


def get_hub(request: Request) -> "NotificationHub":
    return request.app.state.hub  # type: ignore[no-any-return]


def get_settlement_queue(request: Request) -> "SettlementQueue":
    return request.app.state.settlement_queue  # type: ignore[no-any-return]
