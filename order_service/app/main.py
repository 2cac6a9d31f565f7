# --- Imports ---
import logging
from contextlib import asynccontextmanager
from typing import List

from fastapi import Depends, FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from .config import EVENTS_EXCHANGE, RABBITMQ_HOST, configure_logging
from .database import SessionLocal, engine
from .errors import InvalidInput, NotFound, StoreError
from .messaging.producer import RabbitMQProducer
from .models import Base
from .schemas import OrderCreate, OrderRead
from .store import OrderStore

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Owns the database and broker lifecycle for the running process."""
    configure_logging()
    # Create database tables on startup if they don't exist.
    Base.metadata.create_all(bind=engine)

    publisher = None
    if RABBITMQ_HOST:
        publisher = RabbitMQProducer(RABBITMQ_HOST, exchange_name=EVENTS_EXCHANGE)
    app.state.store = OrderStore(SessionLocal, publisher=publisher)
    logger.info("Order service started")
    try:
        yield
    finally:
        if publisher is not None:
            publisher.close()
        engine.dispose()


# --- App Instance ---
app = FastAPI(lifespan=lifespan)


def get_store(request: Request) -> OrderStore:
    """FastAPI dependency returning the process-wide order store."""
    return request.app.state.store


# --- Error Mapping ---
def _describe_validation_errors(errors):
    """Render pydantic errors as 'body.items.0.quantity: message; ...'."""
    return "; ".join(
        f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}" for err in errors
    )


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": _describe_validation_errors(exc.errors())},
    )


@app.exception_handler(InvalidInput)
async def invalid_input_handler(request: Request, exc: InvalidInput):
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"error": str(exc)})


@app.exception_handler(NotFound)
async def not_found_handler(request: Request, exc: NotFound):
    return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={"error": "Order not found"})


@app.exception_handler(StoreError)
async def store_error_handler(request: Request, exc: StoreError):
    logger.error("Store failure on %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content={"error": str(exc)})


# --- Endpoints ---
@app.get("/")
def root():
    """Health check endpoint."""
    return {"message": "Order service is running"}


@app.post("/orders", status_code=status.HTTP_201_CREATED)
def create_order(order: OrderCreate, store: OrderStore = Depends(get_store)):
    """Creates an order together with its initial items."""
    order_id = store.create_order(order.customer_name, order.ordered_at, order.items)
    return {"message": "Order added successfully", "orderId": order_id}


@app.get("/orders", response_model=List[OrderRead])
def list_orders(store: OrderStore = Depends(get_store)):
    """Retrieves every order with its items, ascending by order id."""
    return store.list_orders()


@app.put("/orders/{order_id}")
def replace_order(order_id: int, order: OrderCreate, store: OrderStore = Depends(get_store)):
    """Replaces an order's fields and its entire item set."""
    store.replace_order(order_id, order.customer_name, order.ordered_at, order.items)
    return {"message": "Order updated successfully"}


@app.delete("/orders/{order_id}")
def delete_order(order_id: int, store: OrderStore = Depends(get_store)):
    """Deletes an order and all of its items."""
    store.delete_order(order_id)
    return {"message": "Order deleted successfully"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("order_service.app.main:app", host="0.0.0.0", port=8080)
