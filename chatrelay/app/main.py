# chatrelay/app/main.py
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from sqlalchemy.exc import SQLAlchemyError

from chatrelay.app.config.settings import settings
from chatrelay.app.database.session import init_db
from chatrelay.app.users.routes import router as users_router
from chatrelay.app.messages.routes import router as messages_router
from chatrelay.app.relay.routes import router as relay_router
from chatrelay.app.relay.manager import manager

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# exits the process if the database cannot be reached
init_db()


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    await manager.shutdown()


app = FastAPI(title=settings.APP_NAME, lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    # missing or mistyped fields are a client error, reported as 400
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": jsonable_errors(exc)},
    )


@app.exception_handler(SQLAlchemyError)
async def store_error_handler(request: Request, exc: SQLAlchemyError):
    # websocket scopes carry no method
    method = request.scope.get("method", request.scope["type"])
    logger.error("Store error on %s %s: %s", method, request.url.path, exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Database error"},
    )


def jsonable_errors(exc: RequestValidationError):
    return [
        {"loc": list(err.get("loc", ())), "msg": err.get("msg", ""), "type": err.get("type", "")}
        for err in exc.errors()
    ]


# routers
app.include_router(users_router)
app.include_router(messages_router)
app.include_router(relay_router)


@app.get("/", response_class=PlainTextResponse)
def read_root():
    return "Hello World!"
