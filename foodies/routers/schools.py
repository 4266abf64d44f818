"""Per-school report for the superadmin dashboard."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from foodies.db.base import get_db
from foodies.domain.profile import Profile
from foodies.routers.deps import require_superadmin
from foodies.schemas.school import SchoolsResponse
from foodies.services.schools import SchoolService

router = APIRouter(tags=["Schools"])


@router.get("/schools", response_model=SchoolsResponse)
async def list_schools(
    _: Profile = Depends(require_superadmin),
    session: AsyncSession = Depends(get_db),
):
    return SchoolsResponse(schools=await SchoolService(session).report())
