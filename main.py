"""Main FastAPI application for Flux, the daily budget tracker."""
import time
import datetime as dt

from fastapi import FastAPI, HTTPException, Depends, Query, Request, status
from fastapi.responses import JSONResponse, RedirectResponse
from sqlmodel import SQLModel, create_engine, Session

from prometheus_fastapi_instrumentator import Instrumentator
from sqlalchemy.exc import OperationalError, SQLAlchemyError

import storage
from auth import DEMO_IDENTITY, AuthProvider, destroy_session, select_auth_provider
from budget import ProfileMissingError, compute_budget_snapshot
from config import settings, setup_logging
from history import build_history
from models import CATEGORIES, FinancialProfile, Transaction, User
from schemas import CategoryRead, FinancialProfileCreate, TransactionCreate, UserRead
from utils import offset_timezone

APP_VERSION = "0.1.0"

logger = setup_logging(settings.LOG_LEVEL)

app = FastAPI(title="Flux", version=APP_VERSION)
instrumentator = Instrumentator().instrument(app)
# Expose Prometheus metrics at /metrics
instrumentator.expose(app)

# Chosen once per process; handlers only ever see the injected provider.
auth_provider = select_auth_provider(settings)

#API endpoint for quick health checks
@app.get("/")
def root():
    return {"message": "Flux API is running. See /health for status."}

@app.get("/health")
def health():
    return {
        "status": "ok",
        "timestamp": dt.datetime.now(dt.timezone.utc).isoformat(),
        "app": "flux",
        "version": APP_VERSION,
    }

DATABASE_URL = settings.DATABASE_URL
if DATABASE_URL.startswith("sqlite"):
    connect_args = {"check_same_thread": False}
else:
    connect_args = {}

engine = create_engine(
    DATABASE_URL,
    connect_args=connect_args,
    echo=False,
    pool_pre_ping=not DATABASE_URL.startswith("sqlite"),
)

# One database session per request, closed automatically afterwards.
def get_session():
    """Provide a database session per request."""
    with Session(engine) as session:
        yield session


def get_auth_provider() -> AuthProvider:
    """Return the provider selected at startup."""
    return auth_provider


def get_current_user(
    request: Request,
    session: Session = Depends(get_session),
    provider: AuthProvider = Depends(get_auth_provider),
) -> User:
    """Resolve the acting user or reject with 401."""
    return provider.resolve(request, session)


@app.exception_handler(SQLAlchemyError)
async def database_error_handler(request: Request, exc: SQLAlchemyError):
    """Store failures become a plain 500; details only go to the log."""
    logger.error(
        "Database error on %s %s", request.method, request.url.path, exc_info=exc
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal Server Error"},
    )


@app.on_event("startup")
def on_startup() -> None:
    """
    Run once when the app starts:
    - Wait for the database to be ready
    - Create tables
    - Seed the demo user when sessions are not enforced
    """
    retries = 10
    delay = 2  # seconds
    last_exc: Exception | None = None

    logger.info("Auth mode: %s", auth_provider.name)

    for attempt in range(1, retries + 1):
        try:
            SQLModel.metadata.create_all(engine)

            if not settings.auth_enforced:
                with Session(engine) as session:
                    storage.ensure_user(session, DEMO_IDENTITY)

            logger.info("Database ready, tables created.")
            return
        except OperationalError as exc:
            last_exc = exc
            logger.warning(
                "DB not ready yet (attempt %d/%d); waiting %ds...",
                attempt, retries, delay,
            )
            time.sleep(delay)

    # If we get here, DB never became ready
    logger.error("Giving up connecting to the database.")
    if last_exc:
        raise last_exc
    raise RuntimeError("Database not reachable on startup.")


# AUTH ENDPOINTS
# No identity provider round-trip happens in this deployment: login and
# callback just send the browser home.
@app.get("/api/login")
def login():
    return RedirectResponse(url="/", status_code=status.HTTP_302_FOUND)


@app.get("/api/callback")
def callback():
    return RedirectResponse(url="/", status_code=status.HTTP_302_FOUND)


@app.get("/api/logout")
def logout(request: Request, session: Session = Depends(get_session)):
    """Drop the server-side session, clear the cookie and go home."""
    response = RedirectResponse(url="/", status_code=status.HTTP_302_FOUND)
    destroy_session(session, request, response, secure=settings.is_production)
    return response


@app.get("/api/auth/user", response_model=UserRead)
def read_current_user(current_user: User = Depends(get_current_user)):
    """Return the current authenticated user."""
    return current_user

# CATEGORY ENDPOINTS
@app.get("/api/categories", response_model=list[CategoryRead])
def list_categories(current_user: User = Depends(get_current_user)):
    """List the fixed category table."""
    return CATEGORIES

# FINANCIAL PROFILE ENDPOINTS
@app.get("/api/financial-profile", response_model=FinancialProfile)
def read_financial_profile(
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    """Return the user's profile; 404 sends the client to the setup flow."""
    profile = storage.get_financial_profile(session, current_user.id)
    if profile is None:
        raise HTTPException(status_code=404, detail="Profile not found")
    return profile


@app.post("/api/financial-profile", response_model=FinancialProfile)
def save_financial_profile(
    payload: FinancialProfileCreate,
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    """Create or update the user's profile."""
    return storage.upsert_financial_profile(session, current_user.id, payload.model_dump())

# TRANSACTION ENDPOINTS
# Return all of the user's transactions, newest first.
@app.get("/api/transactions", response_model=list[Transaction])
def list_transactions(
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    return storage.list_transactions(session, current_user.id)


@app.post("/api/transactions", response_model=Transaction, status_code=201)
def create_transaction(
    payload: TransactionCreate,
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    """Record an expense for the current user."""
    return storage.create_transaction(session, current_user.id, payload.model_dump())


# Client clock offset in minutes east of UTC (e.g. -300 for UTC-5).
def get_client_timezone(
    utc_offset: int = Query(0, ge=-14 * 60, le=14 * 60),
) -> dt.tzinfo:
    return offset_timezone(utc_offset)


@app.get("/api/transactions/history")
def transaction_history(
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
    tz: dt.tzinfo = Depends(get_client_timezone),
):
    """Transactions grouped by the client's calendar day, newest first."""
    return build_history(storage.list_transactions(session, current_user.id), tz=tz)

# BUDGET
@app.get("/api/budget/today")
def budget_today(
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
    tz: dt.tzinfo = Depends(get_client_timezone),
):
    """Today's safe-to-spend figure and the month totals around it."""
    profile = storage.get_financial_profile(session, current_user.id)
    transactions = storage.list_transactions(session, current_user.id)
    try:
        return compute_budget_snapshot(profile, transactions, tz=tz)
    except ProfileMissingError:
        raise HTTPException(status_code=404, detail="Profile not found")
