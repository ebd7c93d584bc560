"""
Utility bill repository.
"""

import uuid
from typing import List
from sqlalchemy import select, desc
from sqlalchemy.ext.asyncio import AsyncSession

from rental_api.models.utility_bill import UtilityBill
from rental_api.repositories.base import BaseRepository


class UtilityBillRepository(BaseRepository[UtilityBill]):

    def __init__(self, db: AsyncSession):
        super().__init__(UtilityBill, db)

    async def list_by_property(self, property_id: uuid.UUID) -> List[UtilityBill]:
        query = (
            select(UtilityBill)
            .where(UtilityBill.property_id == property_id)
            .order_by(desc(UtilityBill.due_date))
        )
        result = await self.db.execute(query)
        return list(result.scalars().all())
