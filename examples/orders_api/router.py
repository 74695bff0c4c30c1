"""Orders API routers.

Each router's first tag is its controller name, which is what the
controller-scoped middleware matches against.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import Response
from pydantic import BaseModel

from oauthgate import CurrentUser

orders_router = APIRouter(prefix="/orders", tags=["Orders"])
customers_router = APIRouter(prefix="/customers", tags=["Customers"])
pages_router = APIRouter(prefix="/pages", tags=["Pages"])
health_router = APIRouter(tags=["Health"])


# -- Request / Response models ------------------------------------------------


class PlaceOrderRequest(BaseModel):
    sku: str
    quantity: int = 1


class OrderResponse(BaseModel):
    id: str
    sku: str
    quantity: int
    placed_by: str | None


class OrderListResponse(BaseModel):
    api_version: str | None
    orders: list[OrderResponse]


class ClaimResponse(BaseModel):
    type: str
    value: str


class CustomerProfileResponse(BaseModel):
    name: str | None
    authentication_type: str | None
    roles: list[str]
    claims: list[ClaimResponse]


# In-memory store -- replaced by a real repository in production.
_orders: dict[str, OrderResponse] = {}


def require_admin(user: CurrentUser) -> None:
    """Allow callers whose token carries ``role=admin``."""
    if not user.has_claim("role", "admin"):
        raise HTTPException(status_code=403, detail="Admin role required")


# -- Orders -------------------------------------------------------------------


@orders_router.get("/")
def list_orders(request: Request, user: CurrentUser) -> OrderListResponse:
    """List orders. The api-version header is defaulted by a scoped filter."""
    return OrderListResponse(
        api_version=request.headers.get("api-version"),
        orders=list(_orders.values()),
    )


@orders_router.post("/", status_code=201)
def place_order(body: PlaceOrderRequest, user: CurrentUser) -> OrderResponse:
    order = OrderResponse(
        id=str(len(_orders) + 1),
        sku=body.sku,
        quantity=body.quantity,
        placed_by=user.name,
    )
    _orders[order.id] = order
    return order


@orders_router.delete("/{order_id}", status_code=204)
def cancel_order(
    order_id: str,
    _: Annotated[None, Depends(require_admin)],
) -> None:
    """Cancel an order. Requires the ``admin`` role."""
    _orders.pop(order_id, None)


# -- Customers ----------------------------------------------------------------


@customers_router.get("/me")
def current_customer(user: CurrentUser) -> CustomerProfileResponse:
    """Describe the authenticated caller."""
    return CustomerProfileResponse(
        name=user.name,
        authentication_type=user.authentication_type,
        roles=[c.value for c in user.find_all("role")],
        claims=[ClaimResponse(type=c.type, value=c.value) for c in user],
    )


# -- Pages (cookie session, outside the gate) ---------------------------------


@pages_router.get("/dashboard")
def dashboard(request: Request) -> Response:
    """Browser page guarded by a session cookie instead of a token."""
    if "session" not in request.cookies:
        return Response(status_code=401)
    return Response(content="dashboard", media_type="text/plain")


# -- Health -------------------------------------------------------------------


@health_router.get("/healthz")
def healthz() -> dict[str, str]:
    return {"status": "ok"}
