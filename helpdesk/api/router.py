from fastapi import APIRouter

from helpdesk.api.routes.accounts import router as account_router
from helpdesk.api.routes.health import router as health_router
from helpdesk.api.routes.tickets import router as ticket_router

api_router = APIRouter()
api_router.include_router(health_router, tags=["health"])
api_router.include_router(ticket_router, tags=["tickets"])
api_router.include_router(account_router, tags=["accounts"])
