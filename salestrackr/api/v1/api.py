"""
V1 API router aggregator: wires all endpoint modules together.
"""

from fastapi import APIRouter

from salestrackr.api.v1.endpoints import (auth, clients, depots, health,
                                          missed_orders, product_complaints,
                                          training_logs, visits)

api_router = APIRouter()

# Health (public)
api_router.include_router(health.router)

# Auth (register, login, logout, me)
api_router.include_router(auth.router)

# Visit ledger
api_router.include_router(visits.router)

# Client directory and field reports
api_router.include_router(clients.router)
api_router.include_router(depots.router)
api_router.include_router(missed_orders.router)
api_router.include_router(training_logs.router)
api_router.include_router(product_complaints.router)
