from typing import List

from fastapi import APIRouter, Query

from ...schemas.route import GeocodeResult
from ...services.geocode import search_places

router = APIRouter()


@router.get("/search", response_model=List[GeocodeResult])
async def geocode_search(
    q: str = Query(..., description="Free-text address or place name"),
    count: int = Query(5, ge=1, le=20),
) -> List[GeocodeResult]:
    """
    Address suggestions for the start/end inputs. Empty when nothing
    matches or the geocoder is unavailable.
    """
    return await search_places(q, count=count)
