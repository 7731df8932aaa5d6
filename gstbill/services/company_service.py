"""Company profile service and invoice acronym resolution."""
import logging
import re
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from gstbill.models.company import Company
from gstbill.schemas.company import CompanyUpdate


logger = logging.getLogger(__name__)

_ALPHA = re.compile(r"[A-Za-z]")


def derive_acronym(company_name: Optional[str]) -> str:
    """
    Build the default invoice acronym from a company name.

    Takes the first alphabetic character of each whitespace-separated word,
    so "Acme Global Traders" → "AGT" and "123 Traders" → "T".
    """
    if not company_name or not company_name.strip():
        return ""
    letters = []
    for word in company_name.split():
        match = _ALPHA.search(word)
        if match:
            letters.append(match.group(0).upper())
    return "".join(letters)


def resolve_acronym(company: Optional[Company]) -> str:
    """Explicit invoice prefix if configured, else derived from the company name."""
    if company is None:
        return ""
    explicit = (company.invoice_prefix or "").strip()
    if explicit:
        return explicit
    return derive_acronym(company.company_name)


class CompanyService:
    """Read and update the single seller profile."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_profile(self) -> Optional[Company]:
        result = await self.db.execute(
            select(Company)
            .where(Company.is_active == True)
            .order_by(Company.created_at)
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def upsert_profile(self, data: CompanyUpdate) -> Company:
        """Create the profile on first save, update it afterwards."""
        company = await self.get_profile()
        values = data.model_dump(exclude_unset=True)

        if company is None:
            company = Company(**values)
            self.db.add(company)
            logger.info("Company profile created: %s", company.company_name)
        else:
            for field, value in values.items():
                setattr(company, field, value)
            logger.info("Company profile updated: %s", company.company_name)

        await self.db.flush()
        return company
