from fastapi import APIRouter, Request

router = APIRouter()


@router.get("/health", summary="Health Check", description="Check the health status of the application.")
async def health_check(request: Request):
    settings = request.app.state.settings
    return {
        "status": "healthy",
        "blobBackend": settings.blob_backend,
        "ocrProvider": settings.ocr_provider,
        "generationProvider": settings.generation_provider,
        "datastoreBackend": settings.datastore_backend,
    }
