from fastapi import FastAPI, Request, HTTPException
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
import logging
from gradebook.core.config import settings
from gradebook.core.database import engine
from gradebook.models.postgresql import Base
from gradebook.api.v1.endpoints import assignments
from gradebook.utils.response import error_response, field_errors
import uvicorn

logging.basicConfig(level=settings.LOG_LEVEL, format=settings.LOG_FORMAT)
logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup logic
    Base.metadata.create_all(bind=engine)
    logger.info("%s started", settings.PROJECT_NAME)

    yield

    # Shutdown logic
    engine.dispose()

app = FastAPI(title=settings.PROJECT_NAME, lifespan=lifespan)

@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    return JSONResponse(status_code=exc.status_code, content=error_response(message=exc.detail), headers=exc.headers)

@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = field_errors(exc.errors())
    message = errors[0]["message"] if errors else "Validation failed"
    return JSONResponse(status_code=422, content=error_response(message=message, data=errors))

# Include Routers
app.include_router(assignments.router, prefix=f"{settings.API_V1_PREFIX}/assignments", tags=["assignments"])
app.include_router(assignments.types_router, prefix=settings.API_V1_PREFIX, tags=["assignments"])

@app.get("/health")
def health():
    return {"status": "healthy", "project": settings.PROJECT_NAME}

if __name__ == "__main__":
    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=True)
