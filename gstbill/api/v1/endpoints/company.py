"""API endpoints for the company profile.

The profile's acronym namespaces every invoice number.
"""
from fastapi import APIRouter, HTTPException, status

from gstbill.api.deps import DB
from gstbill.models.company import Company
from gstbill.schemas.company import CompanyUpdate, CompanyResponse
from gstbill.services.company_service import CompanyService, resolve_acronym

router = APIRouter()


def _to_response(company: Company) -> CompanyResponse:
    response = CompanyResponse.model_validate(company)
    response.acronym = resolve_acronym(company)
    return response


@router.get("", response_model=CompanyResponse)
async def get_company(db: DB):
    """Get the company profile."""
    company = await CompanyService(db).get_profile()
    if not company:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Company profile not set up")
    return _to_response(company)


@router.put("", response_model=CompanyResponse)
async def update_company(company_in: CompanyUpdate, db: DB):
    """Create or update the company profile."""
    service = CompanyService(db)
    if await service.get_profile() is None and not company_in.company_name:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="company_name is required to set up the company profile"
        )
    company = await service.upsert_profile(company_in)
    return _to_response(company)
