from contextlib import asynccontextmanager
from fastapi import FastAPI
import uvicorn
import logging

from approval_flow.config import settings
from approval_flow.database import db
from approval_flow.api import admin, approvals

# Setup Logging
logging.basicConfig(level=settings.LOG_LEVEL)
logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    db.connect()
    yield
    db.close()

app = FastAPI(
    title="Expense Approval Flow API",
    description="Multi-stage, consensus-based approval of submitted expenses",
    version="1.0.0",
    lifespan=lifespan,
)

# Router Registration
app.include_router(approvals.router)
app.include_router(admin.router)

# Health Check
@app.get("/health")
async def health_check():
    return {"status": "ok", "environment": settings.ENVIRONMENT}

if __name__ == "__main__":
    uvicorn.run("approval_flow.main:app", host="0.0.0.0", port=8000, reload=True)
