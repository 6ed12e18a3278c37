# backend/routes/stats.py
from collections import defaultdict
from datetime import date, datetime, time, timedelta, timezone
from typing import Dict, List, Optional, Tuple

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import func
from sqlalchemy.orm import Session, selectinload

from database import get_db
from models.category import Category
from models.client import Client, CoClient
from models.command import Command, CommandDetail, CommandStatus
from models.product import Product
from schemas import stats as stats_schemas
from utils.tokenJWT import get_current_user

router = APIRouter(
    prefix="/stats",
    tags=["Stats"],
    dependencies=[Depends(get_current_user)],
)

DateRange = Tuple[datetime, datetime]


# created_at is stored as naive UTC
def _utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def resolve_date_range(
    start_date: Optional[date],
    end_date: Optional[date],
    period: Optional[str],
    now: Optional[datetime] = None,
) -> Optional[DateRange]:
    """
    Creation-date window shared by every stats endpoint.

    An explicit start+end pair wins (the end day is included), otherwise
    `period` month/year runs from the first day of the current month/year up
    to now. No filter for `all` or when nothing is given.
    """
    if start_date and end_date:
        if end_date < start_date:
            raise HTTPException(status_code=400, detail="endDate must not be before startDate")
        return (
            datetime.combine(start_date, time.min),
            datetime.combine(end_date + timedelta(days=1), time.min),
        )

    now = now or _utcnow()
    if period == "month":
        return now.replace(day=1, hour=0, minute=0, second=0, microsecond=0), now
    if period == "year":
        return now.replace(month=1, day=1, hour=0, minute=0, second=0, microsecond=0), now
    return None


class StatsFilter:
    """Query params of /stats/*, turned into per-model filters."""

    def __init__(
        self,
        start_date: Optional[date] = Query(None, alias="startDate", description="Start date (ISO format)"),
        end_date: Optional[date] = Query(None, alias="endDate", description="End date (ISO format)"),
        category_id: Optional[int] = Query(None, alias="categoryId"),
        period: Optional[str] = Query(None, pattern="^(month|year|all)$"),
    ):
        self.category_id = category_id
        self.date_range = resolve_date_range(start_date, end_date, period)

    def _created(self, query, model):
        if self.date_range is None:
            return query
        start, end = self.date_range
        return query.filter(model.created_at >= start, model.created_at < end)

    def products(self, query):
        query = self._created(query, Product)
        if self.category_id is not None:
            query = query.filter(Product.category_id == self.category_id)
        return query

    def commands(self, query):
        return self._created(query, Command)

    def clients(self, query, model=Client):
        return self._created(query, model)


def _month_key(value: datetime) -> str:
    return f"{value.year}-{value.month:02d}"


# === KPIs ===

@router.get("/kpis", response_model=stats_schemas.KPIs)
def get_kpis(f: StatsFilter = Depends(), db: Session = Depends(get_db)):
    total_products = f.products(db.query(Product)).count()
    total_commands = f.commands(db.query(Command)).count()
    total_clients = f.clients(db.query(Client)).count()
    total_co_clients = f.clients(db.query(CoClient), CoClient).count()

    revenue, cost = f.commands(
        db.query(func.coalesce(func.sum(Command.sale_price), 0.0), func.coalesce(func.sum(Command.purchase_price), 0.0))
    ).one()

    by_status = dict(
        f.commands(db.query(Command.status, func.count(Command.id))).group_by(Command.status).all()
    )

    return stats_schemas.KPIs(
        total_products=total_products,
        total_commands=total_commands,
        total_clients=total_clients,
        total_co_clients=total_co_clients,
        total_revenue=round(revenue, 2),
        total_purchase_cost=round(cost, 2),
        total_profit=round(revenue - cost, 2),
        delivered_commands=by_status.get(CommandStatus.DELIVERED, 0),
        profit_commands=by_status.get(CommandStatus.GOT_PROFIT, 0),
        avg_order_value=round(revenue / total_commands, 2) if total_commands else 0.0,
    )


# === Distributions ===

@router.get("/products-by-category", response_model=List[stats_schemas.CategoryCount])
def get_products_by_category(f: StatsFilter = Depends(), db: Session = Depends(get_db)):
    rows = (
        f.products(
            db.query(Product.category_id, Category.name, func.count(Product.id))
            .outerjoin(Category, Category.id == Product.category_id)
        )
        .group_by(Product.category_id, Category.name)
        .order_by(Product.category_id)
        .all()
    )
    return [
        stats_schemas.CategoryCount(category_id=cid, category_name=name or "Unknown", count=count)
        for cid, name, count in rows
    ]


@router.get("/commands-by-status", response_model=List[stats_schemas.StatusCount])
def get_commands_by_status(f: StatsFilter = Depends(), db: Session = Depends(get_db)):
    rows = f.commands(db.query(Command.status, func.count(Command.id))).group_by(Command.status).all()
    return [stats_schemas.StatusCount(status=status.value, count=count) for status, count in rows]


@router.get("/depot-vs-buying", response_model=stats_schemas.DepotVsBuying)
def get_depot_vs_buying(f: StatsFilter = Depends(), db: Session = Depends(get_db)):
    counts = dict(
        f.products(db.query(Product.is_depot, func.count(Product.id))).group_by(Product.is_depot).all()
    )
    depot = counts.get(True, 0)
    buying = counts.get(False, 0)
    return stats_schemas.DepotVsBuying(depot=depot, buying=buying, total=depot + buying)


# === Monthly series ===

@router.get("/monthly-revenue", response_model=List[stats_schemas.MonthlyRevenue])
def get_monthly_revenue(f: StatsFilter = Depends(), db: Session = Depends(get_db)):
    buckets: Dict[str, float] = defaultdict(float)
    for sale_price, created_at in f.commands(db.query(Command.sale_price, Command.created_at)).all():
        buckets[_month_key(created_at)] += sale_price or 0.0
    return [
        stats_schemas.MonthlyRevenue(month=month, revenue=round(revenue, 2))
        for month, revenue in sorted(buckets.items())
    ]


@router.get("/monthly-profit", response_model=List[stats_schemas.MonthlyProfit])
def get_monthly_profit(f: StatsFilter = Depends(), db: Session = Depends(get_db)):
    revenue: Dict[str, float] = defaultdict(float)
    cost: Dict[str, float] = defaultdict(float)
    rows = f.commands(db.query(Command.sale_price, Command.purchase_price, Command.created_at)).all()
    for sale_price, purchase_price, created_at in rows:
        key = _month_key(created_at)
        revenue[key] += sale_price or 0.0
        cost[key] += purchase_price or 0.0
    return [
        stats_schemas.MonthlyProfit(
            month=month,
            profit=round(revenue[month] - cost[month], 2),
            revenue=round(revenue[month], 2),
            cost=round(cost[month], 2),
        )
        for month in sorted(revenue)
    ]


# Twelve buckets of the current year, empty months included
@router.get("/monthly-sold-products", response_model=List[stats_schemas.MonthlyCount])
def get_monthly_sold_products(f: StatsFilter = Depends(), db: Session = Depends(get_db)):
    now = _utcnow()
    year_start = now.replace(month=1, day=1, hour=0, minute=0, second=0, microsecond=0)
    buckets = {f"{now.year}-{month:02d}": 0 for month in range(1, 13)}

    rows = (
        f.commands(db.query(Command.products_number, Command.created_at))
        .filter(Command.created_at >= year_start, Command.created_at <= now)
        .all()
    )
    for products_number, created_at in rows:
        key = _month_key(created_at)
        if key in buckets:
            buckets[key] += products_number
    return [stats_schemas.MonthlyCount(month=month, count=count) for month, count in buckets.items()]


# === Rankings and totals ===

@router.get("/top-products", response_model=List[stats_schemas.TopProduct])
def get_top_products(
    f: StatsFilter = Depends(),
    limit: int = Query(10, ge=1),
    db: Session = Depends(get_db),
):
    details = (
        f.commands(
            db.query(CommandDetail)
            .join(Command, Command.id == CommandDetail.command_id)
            .options(
                selectinload(CommandDetail.product).selectinload(Product.category),
                selectinload(CommandDetail.product).selectinload(Product.photos),
            )
        )
        .all()
    )

    totals: Dict[int, dict] = {}
    for detail in details:
        product = detail.product
        entry = totals.setdefault(product.id, {"product": product, "count": 0, "total_value": 0.0})
        entry["count"] += 1
        entry["total_value"] += product.sale_price or 0.0

    ranked = sorted(totals.values(), key=lambda e: (-e["total_value"], e["product"].id))[:limit]
    return [
        stats_schemas.TopProduct(
            rank=index,
            product_id=e["product"].id,
            product_name=e["product"].name,
            category_name=e["product"].category.name if e["product"].category else "N/A",
            count=e["count"],
            total_value=round(e["total_value"], 2),
            sale_price=e["product"].sale_price,
            photo=e["product"].photos[0].photo_doc if e["product"].photos else None,
        )
        for index, e in enumerate(ranked, start=1)
    ]


# Owned stock earns sale - purchase, dépôt stock earns its stored gain
@router.get("/revenue-breakdown", response_model=stats_schemas.RevenueBreakdown)
def get_revenue_breakdown(f: StatsFilter = Depends(), db: Session = Depends(get_db)):
    buying = f.products(
        db.query(func.coalesce(func.sum(Product.sale_price - func.coalesce(Product.purchase_price, 0.0)), 0.0))
        .filter(Product.is_depot == False)  # noqa: E712
    ).scalar()
    depot = f.products(
        db.query(func.coalesce(func.sum(Product.gain), 0.0)).filter(Product.is_depot == True)  # noqa: E712
    ).scalar()
    return stats_schemas.RevenueBreakdown(
        total_revenue=round(buying + depot, 2),
        buying_revenue=round(buying, 2),
        depot_revenue=round(depot, 2),
    )


@router.get("/command-locations", response_model=List[stats_schemas.CommandLocation])
def get_command_locations(f: StatsFilter = Depends(), db: Session = Depends(get_db)):
    commands = (
        f.commands(
            db.query(Command).options(
                selectinload(Command.details).selectinload(CommandDetail.client),
                selectinload(Command.details).selectinload(CommandDetail.co_client),
            )
        )
        .order_by(Command.id)
        .all()
    )

    locations = []
    for command in commands:
        if not command.delivery_address or not command.delivery_address.strip():
            continue
        first = command.details[0] if command.details else None
        who = "N/A"
        if first is not None and first.client is not None:
            who = f"{first.client.first_name} {first.client.last_name}"
        elif first is not None and first.co_client is not None:
            who = f"{first.co_client.first_name} {first.co_client.last_name}"
        locations.append(stats_schemas.CommandLocation(
            id=command.id,
            address=command.delivery_address,
            revenue=command.sale_price,
            date=command.created_at,
            client=who,
        ))
    return locations


@router.get("/total-surcharge", response_model=stats_schemas.TotalSurcharge)
def get_total_surcharge(f: StatsFilter = Depends(), db: Session = Depends(get_db)):
    total = f.products(db.query(func.coalesce(func.sum(Product.surcharge), 0.0))).scalar()
    return stats_schemas.TotalSurcharge(total_surcharge=round(total, 2))
