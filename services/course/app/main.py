import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.catalog.router import router as catalog_router
from app.certificates.router import router as certificates_router
from app.database import dispose_db, init_db
from app.dependencies import get_settings
from app.enrollment.router import router as enrollment_router
from app.progress.router import router as progress_router
from app.reviews.router import router as reviews_router
from shared.database import get_redis_client
from shared.middleware import register_exception_handlers, request_id_middleware

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    init_db(settings.course_database_url)

    # Redis pool for the catalog outline cache; None disables caching
    app.state.redis = get_redis_client(settings.redis_url)
    logger.info("Course service started (env=%s)", settings.env_name)

    yield

    # Shutdown
    if app.state.redis is not None:
        await app.state.redis.aclose()
    await dispose_db()


SWAGGER_DESCRIPTION = """\
## Course & Learning Service

Owns courses and their ordered content, enrollments, per-content progress,
course completion with certificate issuance, and completion-gated reviews.

### Domain Tags

| Tag | Description |
|-----|-------------|
| **Catalog** | Course and content CRUD, public catalog, next content and resume |
| **Enrollment** | Enroll / unenroll, my enrolled courses |
| **Progress** | Per-content progress, course and cross-course summaries, badges |
| **Certificates** | Course completion, my certificates, lookup by code |
| **Reviews** | Reviews of completed courses |

### Authentication

Endpoints that act on behalf of a user require a JWT Bearer token in the
`Authorization` header. Token structure: `{"sub": "<user_uuid>", ...}`.

### Responses

Every response is wrapped as `{"status": bool, "message": str, "data": ...}`.
Errors carry `request_id` and, for validation failures, `errors`.
"""


def create_app() -> FastAPI:
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(levelname)s:%(name)s: %(message)s",
    )
    app = FastAPI(
        title="Course & Learning Service",
        version="0.1.0",
        description=SWAGGER_DESCRIPTION,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        max_age=600,
    )
    app.middleware("http")(request_id_middleware)
    register_exception_handlers(app)

    app.include_router(catalog_router, prefix="/api/v1")
    # /enrolled-courses/{progress,activity,achievements} must win over /enrolled-courses/{course_id}
    app.include_router(progress_router, prefix="/api/v1")
    app.include_router(enrollment_router, prefix="/api/v1")
    app.include_router(certificates_router, prefix="/api/v1")
    app.include_router(reviews_router, prefix="/api/v1")

    @app.get("/health", tags=["Health"])
    async def health() -> dict:
        return {"status": "ok", "service": "course"}

    return app


app = create_app()
