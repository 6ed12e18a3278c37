# backend/routes/co_clients.py
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy import or_
from sqlalchemy.orm import Session, selectinload

from database import get_db
from models.client import CoClient
from models.command import CommandDetail
from models.product import Product
from models.users import User
from schemas.client import CoClientCreate, CoClientOut, CoClientPage, CoClientUpdate
from schemas.common import MessageResponse
from schemas.product import ProductOut
from utils.audit import write_log, client_ip
from utils.export import csv_response, export_error, fr_date, pdf_response
from utils.pagination import EXPORT_LIMIT, paginate
from utils.pdf import render_table_pdf
from utils.tokenJWT import get_current_user

router = APIRouter(prefix="/co-clients", tags=["Co-clients"], dependencies=[Depends(get_current_user)])

CSV_COLUMNS = ["ID", "Prénom", "Nom", "Email", "Téléphone", "RIB", "Adresse", "Date Création"]


def _get_co_client_or_404(db: Session, co_client_id: int) -> CoClient:
    co_client = db.query(CoClient).filter(CoClient.id == co_client_id).first()
    if not co_client:
        raise HTTPException(status_code=404, detail=f"CoClient with ID {co_client_id} not found")
    return co_client


def _search(query, search: Optional[str]):
    if not search:
        return query
    like = f"%{search}%"
    return query.filter(or_(
        CoClient.first_name.ilike(like),
        CoClient.last_name.ilike(like),
        CoClient.email.ilike(like),
        CoClient.phone_number.ilike(like),
        CoClient.rib.ilike(like),
    ))


@router.post("", response_model=CoClientOut, status_code=201)
def create_co_client(
    payload: CoClientCreate, request: Request,
    db: Session = Depends(get_db), current_user: User = Depends(get_current_user),
):
    co_client = CoClient(**payload.model_dump())
    db.add(co_client)
    db.commit()
    db.refresh(co_client)
    write_log(db, user_id=current_user.id, action="CO_CLIENT_CREATE", resource="co-clients",
              ip=client_ip(request), meta={"id": co_client.id})
    return co_client


@router.get("", response_model=CoClientPage)
def list_co_clients(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1),
    search: Optional[str] = Query(None, description="Search by name, email, phone or RIB"),
    db: Session = Depends(get_db),
):
    query = _search(db.query(CoClient), search).order_by(CoClient.created_at.desc(), CoClient.id.desc())
    return paginate(query, page, limit)


# =========================
# EXPORTS
# =========================
def _export_rows(db: Session):
    return db.query(CoClient).order_by(CoClient.created_at.desc(), CoClient.id.desc()).limit(EXPORT_LIMIT).all()


@router.get("/export/csv")
def export_co_clients_csv(db: Session = Depends(get_db)):
    try:
        records = [
            {
                "ID": c.id,
                "Prénom": c.first_name or "",
                "Nom": c.last_name or "",
                "Email": c.email or "",
                "Téléphone": c.phone_number or "",
                "RIB": c.rib or "",
                "Adresse": c.address or "",
                "Date Création": fr_date(c.created_at),
            }
            for c in _export_rows(db)
        ]
        return csv_response(records, CSV_COLUMNS, "co-clients.csv")
    except Exception as e:
        return export_error("CSV", e)


@router.get("/export/pdf")
def export_co_clients_pdf(db: Session = Depends(get_db)):
    try:
        rows = [
            [c.id, f"{c.first_name} {c.last_name}", c.email, c.phone_number, c.rib]
            for c in _export_rows(db)
        ]
        content = render_table_pdf(
            "Rapport des Co-Clients",
            ["ID", "Nom", "Email", "Téléphone", "RIB"],
            [15, 38, 45, 30, 54],
            rows,
        )
        return pdf_response(content, "co-clients.pdf")
    except Exception as e:
        return export_error("PDF", e)


@router.get("/{co_client_id}", response_model=CoClientOut)
def get_co_client(co_client_id: int, db: Session = Depends(get_db)):
    return _get_co_client_or_404(db, co_client_id)


# Consignment history: every product this co-client brought in, with its sold flag
@router.get("/{co_client_id}/products", response_model=List[ProductOut])
def get_co_client_products(co_client_id: int, db: Session = Depends(get_db)):
    _get_co_client_or_404(db, co_client_id)
    return (
        db.query(Product)
        .options(
            selectinload(Product.category),
            selectinload(Product.photos),
            selectinload(Product.command_details).selectinload(CommandDetail.command),
        )
        .filter(Product.co_client_id == co_client_id)
        .order_by(Product.created_at.desc(), Product.id.desc())
        .all()
    )


@router.patch("/{co_client_id}", response_model=CoClientOut)
def update_co_client(
    co_client_id: int, payload: CoClientUpdate, request: Request,
    db: Session = Depends(get_db), current_user: User = Depends(get_current_user),
):
    co_client = _get_co_client_or_404(db, co_client_id)
    changes = {k: v for k, v in payload.model_dump(exclude_unset=True).items() if v is not None}
    for key, value in changes.items():
        setattr(co_client, key, value)
    db.commit()
    db.refresh(co_client)
    write_log(db, user_id=current_user.id, action="CO_CLIENT_UPDATE", resource="co-clients",
              ip=client_ip(request), meta={"id": co_client.id, "fields": sorted(changes)})
    return co_client


# Products and command rows keep existing with co_client_id set to NULL
@router.delete("/{co_client_id}", response_model=MessageResponse)
def delete_co_client(
    co_client_id: int, request: Request,
    db: Session = Depends(get_db), current_user: User = Depends(get_current_user),
):
    co_client = _get_co_client_or_404(db, co_client_id)
    db.delete(co_client)
    db.commit()
    write_log(db, user_id=current_user.id, action="CO_CLIENT_DELETE", resource="co-clients",
              ip=client_ip(request), meta={"id": co_client_id})
    return {"message": "CoClient deleted successfully"}
