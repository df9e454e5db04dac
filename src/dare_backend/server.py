import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from dare_backend.api.catalog import catalog_router
from dare_backend.api.exceptions import register_exception_handlers
from dare_backend.api.overrides import overrides_router
from dare_backend.api.permissions import permissions_router
from dare_backend.api.principals import principals_router
from dare_backend.api.roles import roles_router
from dare_backend.database import get_db
from dare_backend.permissions.admin import AccessAdministration
from dare_backend.permissions.defaults import apply_defaults, load_profile
from dare_backend.settings import settings

logger = logging.getLogger(__name__)

def startup_logic():

    with next(get_db()) as db:
        if settings.DEBUG_MODE == "production":
            apply_defaults(db, load_profile())
        else:
            AccessAdministration(db).ensure_admin_role()

@asynccontextmanager
async def lifespan(app: FastAPI):
    startup_logic()
    yield

app = FastAPI(lifespan=lifespan)

origins = [
    "*"
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

app.include_router(
    permissions_router,
    prefix="/permissions",
    tags=["permissions"]
)

app.include_router(
    catalog_router,
    prefix="/catalog",
    tags=["permissions", "catalog"]
)

app.include_router(
    roles_router,
    prefix="/roles",
    tags=["roles"]
)

app.include_router(
    principals_router,
    prefix="/principals",
    tags=["principals", "roles"]
)

app.include_router(
    overrides_router,
    prefix="/overrides",
    tags=["roles", "overrides"]
)

@app.get("/", tags=["system"])
def get_status_head():
    return {"status": "ok"}
