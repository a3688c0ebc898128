"""FastAPI routes for menu, orders and billing.

Handlers are plain ``def`` so FastAPI runs them in its threadpool; each
request checks out its own connection from the pool.
"""
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from api.deps import get_database, get_user_id
from api.schemas import (
    BillingCreated,
    BillingRead,
    CreateBillingRequest,
    CreateOrderRequest,
    MenuItemRead,
    OrderCreated,
    OrderRead,
    OrderSummary,
    StatusResponse,
)
from core import billing_service, catalog_service, order_service
from core.db import Database
from core.errors import CanteenError, ErrorKind, ValidationFailure

STATUS_BY_KIND = {
    ErrorKind.VALIDATION: 400,
    ErrorKind.ITEM_UNAVAILABLE: 400,
    ErrorKind.INSUFFICIENT_STOCK: 409,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.INVALID_TRANSITION: 409,
    ErrorKind.CONFLICT: 409,
    ErrorKind.RESOURCE_UNAVAILABLE: 503,
    ErrorKind.PERSISTENCE: 500,
}


def error_response(err: CanteenError) -> HTTPException:
    headers = {"Retry-After": "1"} if err.retryable else None
    return HTTPException(STATUS_BY_KIND[err.kind], err.to_dict(), headers=headers)


def request_validation_response(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed request bodies get the same status and shape as core validation failures."""
    errors = [
        {"loc": list(e.get("loc", ())), "msg": e.get("msg"), "type": e.get("type")}
        for e in exc.errors()
    ]
    err = ValidationFailure("Invalid request", errors=errors)
    return JSONResponse(status_code=STATUS_BY_KIND[err.kind], content={"detail": err.to_dict()})


# ---------------------------------------------------------------------------
# Menu Router
# ---------------------------------------------------------------------------
menu_router = APIRouter(prefix="/api/menu", tags=["menu"])


@menu_router.get("", response_model=List[MenuItemRead])
def list_menu(database: Database = Depends(get_database)):
    try:
        with database.session() as db:
            return catalog_service.list_menu(db)
    except CanteenError as err:
        raise error_response(err)


@menu_router.get("/category/{category}", response_model=List[MenuItemRead])
def list_menu_by_category(category: str, database: Database = Depends(get_database)):
    try:
        with database.session() as db:
            return catalog_service.list_menu_by_category(db, category)
    except CanteenError as err:
        raise error_response(err)


@menu_router.get("/{item_id}", response_model=MenuItemRead)
def get_menu_item(item_id: int, database: Database = Depends(get_database)):
    try:
        with database.session() as db:
            return catalog_service.get_menu_item(db, item_id)
    except CanteenError as err:
        raise error_response(err)


# ---------------------------------------------------------------------------
# Order Router
# ---------------------------------------------------------------------------
order_router = APIRouter(prefix="/api/orders", tags=["orders"])


@order_router.post("", status_code=201, response_model=OrderCreated)
def create_order(
    body: CreateOrderRequest,
    user_id: int = Depends(get_user_id),
    database: Database = Depends(get_database),
):
    try:
        receipt = order_service.create_order(
            database,
            user_id,
            [(i.item_id, i.quantity) for i in body.items],
            body.special_instructions,
        )
    except CanteenError as err:
        raise error_response(err)
    return OrderCreated(order_id=receipt.order_id, total_amount=receipt.total_amount, status=receipt.status)


@order_router.get("", response_model=List[OrderSummary])
def list_orders(user_id: int = Depends(get_user_id), database: Database = Depends(get_database)):
    try:
        return order_service.list_orders(database, user_id)
    except CanteenError as err:
        raise error_response(err)


@order_router.get("/{order_id}", response_model=OrderRead)
def get_order(order_id: int, user_id: int = Depends(get_user_id), database: Database = Depends(get_database)):
    try:
        return order_service.get_order(database, user_id, order_id)
    except CanteenError as err:
        raise error_response(err)


@order_router.put("/{order_id}/cancel", response_model=StatusResponse)
def cancel_order(order_id: int, user_id: int = Depends(get_user_id), database: Database = Depends(get_database)):
    try:
        order_service.cancel_order(database, user_id, order_id)
    except CanteenError as err:
        raise error_response(err)
    return StatusResponse(message="Order cancelled successfully")


# ---------------------------------------------------------------------------
# Billing Router
# ---------------------------------------------------------------------------
billing_router = APIRouter(prefix="/api/billing", tags=["billing"])


@billing_router.post("", status_code=201, response_model=BillingCreated)
def create_billing(
    body: CreateBillingRequest,
    user_id: int = Depends(get_user_id),
    database: Database = Depends(get_database),
):
    try:
        receipt = billing_service.create_billing(
            database, user_id, body.order_id, body.payment_method, body.transaction_id
        )
    except CanteenError as err:
        raise error_response(err)
    return BillingCreated(
        bill_id=receipt.bill_id,
        order_id=receipt.order_id,
        amount=receipt.amount,
        payment_status=receipt.payment_status,
    )


@billing_router.get("", response_model=List[BillingRead])
def list_billings(user_id: int = Depends(get_user_id), database: Database = Depends(get_database)):
    try:
        return billing_service.list_billings(database, user_id)
    except CanteenError as err:
        raise error_response(err)


@billing_router.get("/{bill_id}", response_model=BillingRead)
def get_billing(bill_id: int, user_id: int = Depends(get_user_id), database: Database = Depends(get_database)):
    try:
        return billing_service.get_billing(database, user_id, bill_id)
    except CanteenError as err:
        raise error_response(err)
