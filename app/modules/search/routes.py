from fastapi import APIRouter, Depends
from app.database.supabase_client import get_supabase
from app.modules.search.schemas import SearchResponse
from app.modules.search.service import SearchService
from app.core.dependencies import get_current_user_id
from supabase import Client
from typing import Dict, Optional

router = APIRouter(prefix="/search", tags=["search"])


def get_search_service(supabase: Client = Depends(get_supabase)) -> SearchService:
    return SearchService(supabase)


@router.get("", response_model=SearchResponse)
async def global_search(
    q: Optional[str] = None,
    user_data: Dict = Depends(get_current_user_id),
    service: SearchService = Depends(get_search_service)
):
    """Search projects, VBA projects, documents, submittals and contacts (top 20 by relevance)"""
    return {"results": service.search(q, user_data["id"])}
