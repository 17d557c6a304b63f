from typing import Optional
from fastapi import APIRouter, Body, Depends

from app.models.schemas import DataResponse, Waiver, WaiverExpiryCheck, WaiverExpiryReport
from app.services.waiver_service import WaiverService
from app.core.dependencies import get_waiver_service

router = APIRouter(prefix="/waivers", tags=["waivers"])


@router.delete("/{waiver_id}", response_model=DataResponse[Waiver])
async def delete_waiver(
    waiver_id: str,
    service: WaiverService = Depends(get_waiver_service)
):
    waiver = await service.delete_waiver(waiver_id)
    return DataResponse(data=waiver, message="Waiver deleted")


@router.post("/expire-check", response_model=DataResponse[WaiverExpiryReport])
async def check_expired_waivers(
    request: Optional[WaiverExpiryCheck] = Body(None),
    service: WaiverService = Depends(get_waiver_service)
):
    """List waivers past their expiry, deleting them when ``auto_delete`` is set"""
    auto_delete = request.auto_delete if request else False
    report = await service.check_expired_waivers(auto_delete=auto_delete)
    return DataResponse(data=report)
