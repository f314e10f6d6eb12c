import uvicorn
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from app.api.routers import files, uploads
from app.core.config import settings
from app.core.exceptions import ValidationError
from app.core.logging_config import setup_logging

setup_logging()

# Create FastAPI application
app = FastAPI(title=settings.PROJECT_NAME)

# Include routers
app.include_router(uploads.router, prefix=settings.API_PREFIX)
app.include_router(files.router, prefix=settings.UPLOADS_URL_PATH)

@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError):
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": str(exc)},
    )

if __name__ == "__main__":
    uvicorn.run("main:app", host="0.0.0.0", port=8005, reload=True)
