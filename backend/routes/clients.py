# backend/routes/clients.py
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from database import get_db
from models.client import Client
from models.users import User
from schemas.client import ClientCreate, ClientOut, ClientPage, ClientUpdate
from schemas.common import MessageResponse
from utils.audit import write_log, client_ip
from utils.export import csv_response, export_error, fr_date, pdf_response
from utils.pagination import EXPORT_LIMIT, paginate
from utils.pdf import render_table_pdf
from utils.tokenJWT import get_current_user

router = APIRouter(prefix="/clients", tags=["Clients"], dependencies=[Depends(get_current_user)])

CSV_COLUMNS = ["ID", "Prénom", "Nom", "Email", "Téléphone", "Adresse", "Date Création"]


def _get_client_or_404(db: Session, client_id: int) -> Client:
    client = db.query(Client).filter(Client.id == client_id).first()
    if not client:
        raise HTTPException(status_code=404, detail=f"Client with ID {client_id} not found")
    return client


def _search(query, search: Optional[str]):
    if not search:
        return query
    like = f"%{search}%"
    return query.filter(or_(
        Client.first_name.ilike(like),
        Client.last_name.ilike(like),
        Client.email.ilike(like),
        Client.phone_number.ilike(like),
    ))


@router.post("", response_model=ClientOut, status_code=201)
def create_client(
    payload: ClientCreate, request: Request,
    db: Session = Depends(get_db), current_user: User = Depends(get_current_user),
):
    client = Client(**payload.model_dump())
    db.add(client)
    db.commit()
    db.refresh(client)
    write_log(db, user_id=current_user.id, action="CLIENT_CREATE", resource="clients",
              ip=client_ip(request), meta={"id": client.id})
    return client


@router.get("", response_model=ClientPage)
def list_clients(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1),
    search: Optional[str] = Query(None, description="Search by first name, last name, email or phone"),
    db: Session = Depends(get_db),
):
    query = _search(db.query(Client), search).order_by(Client.created_at.desc(), Client.id.desc())
    return paginate(query, page, limit)


# =========================
# EXPORTS
# =========================
def _export_rows(db: Session):
    return db.query(Client).order_by(Client.created_at.desc(), Client.id.desc()).limit(EXPORT_LIMIT).all()


@router.get("/export/csv")
def export_clients_csv(db: Session = Depends(get_db)):
    try:
        records = [
            {
                "ID": c.id,
                "Prénom": c.first_name or "",
                "Nom": c.last_name or "",
                "Email": c.email or "",
                "Téléphone": c.phone_number or "",
                "Adresse": c.address or "",
                "Date Création": fr_date(c.created_at),
            }
            for c in _export_rows(db)
        ]
        return csv_response(records, CSV_COLUMNS, "clients.csv")
    except Exception as e:
        return export_error("CSV", e)


@router.get("/export/pdf")
def export_clients_pdf(db: Session = Depends(get_db)):
    try:
        rows = [
            [c.id, f"{c.first_name} {c.last_name}", c.email, c.phone_number, c.address]
            for c in _export_rows(db)
        ]
        content = render_table_pdf(
            "Rapport des Clients",
            ["ID", "Nom", "Email", "Téléphone", "Adresse"],
            [15, 40, 50, 32, 45],
            rows,
        )
        return pdf_response(content, "clients.pdf")
    except Exception as e:
        return export_error("PDF", e)


@router.get("/{client_id}", response_model=ClientOut)
def get_client(client_id: int, db: Session = Depends(get_db)):
    return _get_client_or_404(db, client_id)


@router.patch("/{client_id}", response_model=ClientOut)
def update_client(
    client_id: int, payload: ClientUpdate, request: Request,
    db: Session = Depends(get_db), current_user: User = Depends(get_current_user),
):
    client = _get_client_or_404(db, client_id)
    changes = {k: v for k, v in payload.model_dump(exclude_unset=True).items() if v is not None}
    for key, value in changes.items():
        setattr(client, key, value)
    db.commit()
    db.refresh(client)
    write_log(db, user_id=current_user.id, action="CLIENT_UPDATE", resource="clients",
              ip=client_ip(request), meta={"id": client.id, "fields": sorted(changes)})
    return client


@router.delete("/{client_id}", response_model=MessageResponse)
def delete_client(
    client_id: int, request: Request,
    db: Session = Depends(get_db), current_user: User = Depends(get_current_user),
):
    client = _get_client_or_404(db, client_id)
    try:
        db.delete(client)
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=409, detail="Client is referenced by commands")
    write_log(db, user_id=current_user.id, action="CLIENT_DELETE", resource="clients",
              ip=client_ip(request), meta={"id": client_id})
    return {"message": "Client deleted successfully"}
