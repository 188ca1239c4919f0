"""
API endpoints информации о компании.
"""

from fastapi import APIRouter, Depends, Request

from app.api.deps import get_company_service, read_payload
from app.api.responses import success
from app.core.auth import require_admin
from app.services.company_service import CompanyService

router = APIRouter()


@router.get("")
def get_company_info(service: CompanyService = Depends(get_company_service)):
    """Информация о компании (создается со значениями по умолчанию при первом чтении)."""
    return success(service.to_out(service.get()).dump())


@router.put("", dependencies=[Depends(require_admin)])
async def update_company_info(
    request: Request, service: CompanyService = Depends(get_company_service)
):
    """Обновить информацию о компании (разделы сливаются с сохраненными)."""
    fields, _ = await read_payload(request)
    info = service.update(fields)
    return success(
        service.to_out(info).dump(), message="اطلاعات شرکت با موفقیت به‌روزرسانی شد"
    )
