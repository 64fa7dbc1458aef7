# Facturo backend entrypoint: multi-tenant invoicing API.

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from facturo.app.api import auth
from facturo.app.api import companies
from facturo.app.api import company
from facturo.app.api import exports
from facturo.app.api import groups
from facturo.app.api import imports
from facturo.app.api import invoices
from facturo.app.api import taxes
from facturo.app.api import transfers
from facturo.app.api import users
from facturo.app.core.dev_seed import ensure_default_data
from facturo.app.core.errors import register_error_handlers
from facturo.app.core.settings import get_settings
from facturo.app.db.base import Base
from facturo.app.db.session import SessionLocal, engine

settings = get_settings()

Base.metadata.create_all(bind=engine)

app = FastAPI(title=settings.APP_NAME, version=settings.API_VERSION)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_error_handlers(app)

app.include_router(auth.router)
app.include_router(companies.router)
app.include_router(company.router)
app.include_router(users.router)
app.include_router(taxes.router)
app.include_router(groups.router)
app.include_router(invoices.router)
app.include_router(transfers.router)
app.include_router(exports.router)
app.include_router(imports.router)


@app.get("/")
def read_root():
    return {"app": settings.APP_NAME, "status": "ok"}


@app.get("/health")
def health_check():
    return {"status": "ok"}


@app.on_event("startup")
def seed_default_data():
    db = SessionLocal()
    try:
        ensure_default_data(db)
    finally:
        db.close()
