# backend/routes/commands.py
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy.orm import Session, selectinload

from database import get_db
from models.command import Command, CommandDetail, CommandStatus
from models.users import User
from schemas.command import CommandCreate, CommandOut, CommandPage, CommandUpdate
from schemas.common import MessageResponse
from services import command_lifecycle
from services.command_lifecycle import ReferenceNotFoundError, StatusTransitionError
from utils.audit import write_log, client_ip
from utils.export import csv_response, export_error, fr_date, pdf_response
from utils.pagination import EXPORT_LIMIT, paginate
from utils.pdf import render_table_pdf
from utils.tokenJWT import get_current_user

router = APIRouter(prefix="/commands", tags=["Commands"], dependencies=[Depends(get_current_user)])

STATUS_LABELS = {
    CommandStatus.NOT_DELIVERED: "Non livré",
    CommandStatus.DELIVERED: "Livré",
    CommandStatus.GOT_PROFIT: "Profit",
}

CSV_COLUMNS = [
    "ID", "Nombre Produits", "Prix Vente", "Prix Achat", "Statut",
    "Adresse Livraison", "Date Livraison", "Client", "Date Création",
]


def _with_details(query):
    return query.options(
        selectinload(Command.details).selectinload(CommandDetail.product),
        selectinload(Command.details).selectinload(CommandDetail.client),
        selectinload(Command.details).selectinload(CommandDetail.co_client),
    )


def _get_command_or_404(db: Session, command_id: int) -> Command:
    command = _with_details(db.query(Command)).filter(Command.id == command_id).first()
    if not command:
        raise HTTPException(status_code=404, detail=f"Command with ID {command_id} not found")
    return command


def _client_name(command: Command) -> str:
    for detail in command.details:
        if detail.client is not None:
            return f"{detail.client.first_name} {detail.client.last_name}"
    return ""


# =========================
# CREATE
# =========================
@router.post("", response_model=CommandOut, status_code=201)
def create_command(
    payload: CommandCreate, request: Request,
    db: Session = Depends(get_db), current_user: User = Depends(get_current_user),
):
    try:
        command = command_lifecycle.create_command(db, payload)
    except ReferenceNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))

    write_log(db, user_id=current_user.id, action="COMMAND_CREATE", resource="commands",
              ip=client_ip(request),
              meta={"id": command.id, "products": payload.product_ids, "status": command.status.value})
    return _get_command_or_404(db, command.id)


@router.get("", response_model=CommandPage)
def list_commands(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1),
    search: Optional[str] = Query(None, description="Search by delivery address"),
    status: Optional[CommandStatus] = Query(None),
    db: Session = Depends(get_db),
):
    query = _with_details(db.query(Command))
    if search:
        query = query.filter(Command.delivery_address.ilike(f"%{search}%"))
    if status is not None:
        query = query.filter(Command.status == status)
    query = query.order_by(Command.created_at.desc(), Command.id.desc())
    return paginate(query, page, limit)


# =========================
# EXPORTS
# =========================
def _export_rows(db: Session):
    return (
        db.query(Command)
        .options(selectinload(Command.details).selectinload(CommandDetail.client))
        .order_by(Command.created_at.desc(), Command.id.desc())
        .limit(EXPORT_LIMIT)
        .all()
    )


@router.get("/export/csv")
def export_commands_csv(db: Session = Depends(get_db)):
    try:
        records = [
            {
                "ID": c.id,
                "Nombre Produits": c.products_number,
                "Prix Vente": c.sale_price,
                "Prix Achat": c.purchase_price,
                "Statut": STATUS_LABELS.get(c.status, c.status.value),
                "Adresse Livraison": c.delivery_address,
                "Date Livraison": fr_date(c.delivery_date),
                "Client": _client_name(c),
                "Date Création": fr_date(c.created_at),
            }
            for c in _export_rows(db)
        ]
        return csv_response(records, CSV_COLUMNS, "commands.csv")
    except Exception as e:
        return export_error("CSV", e)


@router.get("/export/pdf")
def export_commands_pdf(db: Session = Depends(get_db)):
    try:
        rows = [
            [
                c.id,
                _client_name(c),
                c.products_number,
                f"{c.sale_price:.2f}",
                STATUS_LABELS.get(c.status, c.status.value),
                c.delivery_address,
                fr_date(c.delivery_date),
            ]
            for c in _export_rows(db)
        ]
        content = render_table_pdf(
            "Rapport des Commandes",
            ["ID", "Client", "Produits", "Total", "Statut", "Adresse", "Livraison"],
            [12, 36, 18, 22, 22, 50, 22],
            rows,
        )
        return pdf_response(content, "commands.pdf")
    except Exception as e:
        return export_error("PDF", e)


@router.get("/{command_id}", response_model=CommandOut)
def get_command(command_id: int, db: Session = Depends(get_db)):
    return _get_command_or_404(db, command_id)


# =========================
# UPDATE (status changes included)
# =========================
@router.patch("/{command_id}", response_model=CommandOut)
def update_command(
    command_id: int, payload: CommandUpdate, request: Request,
    db: Session = Depends(get_db), current_user: User = Depends(get_current_user),
):
    command = _get_command_or_404(db, command_id)
    old_status = command.status
    try:
        command_lifecycle.update_command(db, command, payload)
    except StatusTransitionError as e:
        raise HTTPException(status_code=409, detail=str(e))

    write_log(db, user_id=current_user.id, action="COMMAND_UPDATE", resource="commands",
              ip=client_ip(request),
              meta={
                  "id": command_id,
                  "fields": sorted(payload.model_dump(exclude_unset=True)),
                  "status": [old_status.value, command.status.value],
              })
    return _get_command_or_404(db, command_id)


@router.delete("/{command_id}", response_model=MessageResponse)
def delete_command(
    command_id: int, request: Request,
    db: Session = Depends(get_db), current_user: User = Depends(get_current_user),
):
    command = _get_command_or_404(db, command_id)
    command_lifecycle.delete_command(db, command)
    write_log(db, user_id=current_user.id, action="COMMAND_DELETE", resource="commands",
              ip=client_ip(request), meta={"id": command_id})
    return {"message": "Command deleted successfully"}
