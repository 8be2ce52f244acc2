import logging
from fastapi import FastAPI, Request, Depends
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from supabase import Client

from library_app.config import settings
from library_app.database.supabase_client import get_supabase
from library_app.core.rate_limit import limiter
from library_app.modules.auth import routes as auth_routes
from library_app.modules.profiles import routes as profiles_routes
from library_app.modules.coins import routes as coins_routes
from library_app.modules.books import routes as books_routes
from library_app.modules.borrows import routes as borrows_routes
from library_app.modules.addition_requests import routes as addition_requests_routes
from library_app.modules.reviews import routes as reviews_routes
from library_app.modules.reading_goals import routes as reading_goals_routes
from library_app.modules.analytics import routes as analytics_routes

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%SZ",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title=settings.app_name,
    debug=settings.debug,
    redirect_slashes=False,
)
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled exception: %s", exc)
    if settings.is_production:
        return JSONResponse(status_code=500, content={"detail": "Internal server error"})
    return JSONResponse(status_code=500, content={"detail": str(exc)})


class SecurityHeadersMiddleware:
    def __init__(self, app):
        self.app = app

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        async def send_with_headers(message):
            if message["type"] == "http.response.start":
                message.setdefault("headers", [])
                message["headers"].extend([
                    (b"X-Content-Type-Options", b"nosniff"),
                    (b"X-Frame-Options", b"DENY"),
                    (b"X-XSS-Protection", b"1; mode=block"),
                ])
            await send(message)

        await self.app(scope, receive, send_with_headers)


app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.get_cors_origins_list(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include module routes
for module_routes in (
    auth_routes,
    profiles_routes,
    coins_routes,
    books_routes,
    borrows_routes,
    addition_requests_routes,
    reviews_routes,
    reading_goals_routes,
    analytics_routes,
):
    app.include_router(module_routes.router, prefix="/api/v1")


@app.on_event("startup")
async def startup_event():
    logger.info(f"Application startup ({settings.environment})")
    logger.info(
        f"Coin rules: start {settings.starting_coin_balance}, review {settings.review_reward}, "
        f"summary {settings.summary_reward}, borrow cost {settings.borrow_coin_cost}, "
        f"late fee {settings.overdue_penalty_per_day}/day; loan {settings.loan_period_days} days, "
        f"max {settings.max_active_issues} books"
    )


@app.on_event("shutdown")
async def shutdown_event():
    logger.info("Application shutdown")


@app.get("/")
async def root():
    return {"message": "Welcome to the library coins backend", "status": "healthy"}


@app.get("/health")
@limiter.exempt
async def health():
    return {"status": "healthy"}


@app.get("/ready")
@limiter.exempt
async def ready(supabase: Client = Depends(get_supabase)):
    """Readiness check: the profiles table must be reachable."""
    try:
        supabase.table("profiles").select("id").limit(1).execute()
    except Exception as e:
        logger.warning(f"Readiness check failed: {e}")
        return JSONResponse(status_code=503, content={"status": "unavailable"})
    return {"status": "ready"}
