# stockdesk/api/deps.py
from fastapi import HTTPException, Request, status

from stockdesk.client.protocol import DataClient


async def get_client(request: Request) -> DataClient:
    """FastAPI dependency returning the client created at startup."""
    client = getattr(request.app.state, "supabase", None)
    if client is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Data store is not configured",
        )
    return client
