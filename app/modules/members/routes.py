from fastapi import APIRouter, Depends
from app.database.supabase_client import get_supabase
from app.modules.members.schemas import MemberCreate, MemberResponse
from app.modules.members.service import MemberService
from app.core.dependencies import require_permission
from supabase import Client
from typing import Dict

router = APIRouter(prefix="/members", tags=["members"])


def get_member_service(supabase: Client = Depends(get_supabase)) -> MemberService:
    return MemberService(supabase)


@router.get("")
async def list_members(
    user_data: Dict = Depends(require_permission("members:read")),
    service: MemberService = Depends(get_member_service)
):
    return {"data": service.list_members()}


@router.post("", response_model=MemberResponse, status_code=201)
async def create_member(
    member_data: MemberCreate,
    user_data: Dict = Depends(require_permission("members:create")),
    service: MemberService = Depends(get_member_service)
):
    return service.create_member(member_data)


@router.delete("/{member_id}", status_code=204)
async def delete_member(
    member_id: str,
    user_data: Dict = Depends(require_permission("members:delete")),
    service: MemberService = Depends(get_member_service)
):
    service.delete_member(member_id)
    return None
