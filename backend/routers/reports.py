from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from db.database import get_async_session
from schemas.reports import OrderedItemsByPeriod, PopularItem, SearchResult, TotalSales
from services.report_service import ReportService

router = APIRouter()


@router.get("/total-sales", response_model=TotalSales)
async def total_sales(db: AsyncSession = Depends(get_async_session)):
    return await ReportService(db).total_sales()


@router.get("/popular-items", response_model=List[PopularItem])
async def popular_items(limit: int = Query(10), db: AsyncSession = Depends(get_async_session)):
    return await ReportService(db).popular_items(limit)


@router.get("/orderedItemsByPeriod", response_model=OrderedItemsByPeriod, response_model_exclude_none=True)
async def ordered_items_by_period(
    period: str = Query(...),
    month: Optional[str] = Query(None),
    year: Optional[int] = Query(None),
    db: AsyncSession = Depends(get_async_session),
):
    return await ReportService(db).ordered_items_by_period(period, month, year)


@router.get("/search", response_model=SearchResult)
async def search(
    q: Optional[str] = Query(None),
    filter: Optional[str] = Query(None),
    minPrice: float = Query(0),
    maxPrice: Optional[float] = Query(None),
    db: AsyncSession = Depends(get_async_session),
):
    return await ReportService(db).search(q, filter, minPrice, maxPrice)
