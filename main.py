from fastapi import FastAPI, Depends, HTTPException, status
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.orm import Session
from sqlalchemy import text
from pulse_onboarding.database import get_db
from pulse_onboarding.routers import auth, admin, onboarding
from pulse_onboarding.core.config import settings
from pulse_onboarding.core.logging_config import logger

# Tables are created by Alembic migrations

app = FastAPI(
    title="Pulse Onboarding API",
    version="1.0.0",
    docs_url=None if settings.is_production else "/docs",
    redirect_slashes=False  # Disable automatic redirects to prevent POST data loss
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(auth.router, prefix="/api/auth", tags=["Authentication"])
app.include_router(admin.router, prefix="/api/admin", tags=["Admin"])
app.include_router(onboarding.router, prefix="/api/onboarding", tags=["Onboarding"])

logger.info(f"Pulse Onboarding API starting (environment={settings.ENVIRONMENT}, entities={settings.ENTITY_BACKEND})")


@app.get("/health")
async def health_check(db: Session = Depends(get_db)):
    try:
        db.execute(text("SELECT 1"))
        return {
            "status": "healthy",
            "database": "connected",
            "entity_backend": settings.ENTITY_BACKEND,
        }
    except Exception as e:
        logger.error(f"Health check failed: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Service unhealthy"
        )
