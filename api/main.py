from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from columns import router as columns_router
from core import db, log, settings
from core.errors import register_error_handlers
from identity import router as identity_router
from ticket_assignees import router as ticket_assignees_router
from tickets import router as tickets_router
from users import router as users_router

API_PREFIX = "/api"


@asynccontextmanager
async def lifespan(_: FastAPI):
    log.configure_logging()
    # Initialize the DB pool once per process.
    await db.init_pool()
    try:
        yield
    finally:
        await db.close_pool()


app = FastAPI(lifespan=lifespan)

# Allow the frontend dev server to call this API from the browser.
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_error_handlers(app)

app.include_router(columns_router.router, prefix=API_PREFIX, tags=["columns"])
app.include_router(tickets_router.router, prefix=API_PREFIX, tags=["tickets"])
app.include_router(ticket_assignees_router.router, prefix=API_PREFIX, tags=["ticket_assignees"])
app.include_router(users_router.router, prefix=API_PREFIX, tags=["users"])
app.include_router(identity_router.router, prefix=API_PREFIX, tags=["auth"])


@app.get("/health")
def health() -> dict:
    return {"status": "ok"}


@app.get("/")
def root() -> dict:
    return {"message": "frameboard api"}
