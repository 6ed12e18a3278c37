# backend/schemas/stats.py
from datetime import datetime
from typing import Optional

from schemas.common import ORMBase


class KPIs(ORMBase):
    total_products: int
    total_commands: int
    total_clients: int
    total_co_clients: int
    total_revenue: float
    total_purchase_cost: float
    total_profit: float
    delivered_commands: int
    profit_commands: int
    avg_order_value: float


class CategoryCount(ORMBase):
    category_id: int
    category_name: str
    count: int


class StatusCount(ORMBase):
    status: str
    count: int


class MonthlyRevenue(ORMBase):
    month: str
    revenue: float


class MonthlyProfit(ORMBase):
    month: str
    profit: float
    revenue: float
    cost: float


class MonthlyCount(ORMBase):
    month: str
    count: int


class TopProduct(ORMBase):
    rank: int
    product_id: int
    product_name: str
    category_name: str
    count: int
    total_value: float
    sale_price: float
    photo: Optional[str] = None


class RevenueBreakdown(ORMBase):
    total_revenue: float
    buying_revenue: float
    depot_revenue: float


class DepotVsBuying(ORMBase):
    depot: int
    buying: int
    total: int


class CommandLocation(ORMBase):
    id: int
    address: str
    revenue: float
    date: Optional[datetime] = None
    client: str


class TotalSurcharge(ORMBase):
    total_surcharge: float
