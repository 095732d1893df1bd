from fastapi import APIRouter
from fastapi.responses import PlainTextResponse

router = APIRouter(tags=["health"])

@router.get("/", response_class=PlainTextResponse)
async def root():
    """Liveness text for quick manual checks."""
    return "I am Running"

@router.get("/health")
async def health_check():
    """Health check endpoint for load balancers and monitoring."""
    return {"status": "OK"}
