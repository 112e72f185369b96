from typing import Dict, Optional
from pydantic import BaseModel

class SummaryTotals(BaseModel):
    users: int
    motoboys: int
    establishments: int

class RatingTotals(BaseModel):
    average: Optional[float] = None
    count: int = 0

class SummaryReport(BaseModel):
    totals: SummaryTotals
    orders: Dict[str, int]
    ratings: RatingTotals
