# backend/routes/products.py
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from database import get_db
from models.category import Category
from models.client import CoClient
from models.command import CommandDetail
from models.product import Product
from models.users import User
from schemas.common import MessageResponse
from schemas.product import ProductCreate, ProductOut, ProductPage, ProductUpdate
from services.pricing import apply_pricing
from utils.audit import write_log, client_ip
from utils.export import csv_response, export_error, fr_date, pdf_response
from utils.pagination import EXPORT_LIMIT, paginate
from utils.pdf import render_table_pdf
from utils.tokenJWT import get_current_user

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/products", tags=["Products"], dependencies=[Depends(get_current_user)])

CSV_COLUMNS = [
    "ID", "Nom Produit", "Description", "Prix Vente", "Prix Achat", "Quantité Stock",
    "En Dépôt", "Pourcentage Dépôt", "Surcharge", "Gain", "Statut", "Catégorie",
    "Co-Client", "Date Création",
]


# ---- HELPERS ----
def _with_relations(query):
    return query.options(
        selectinload(Product.category),
        selectinload(Product.co_client),
        selectinload(Product.photos),
        selectinload(Product.command_details).selectinload(CommandDetail.command),
    )


def _get_product_or_404(db: Session, product_id: int) -> Product:
    product = _with_relations(db.query(Product)).filter(Product.id == product_id).first()
    if not product:
        raise HTTPException(status_code=404, detail=f"Product with ID {product_id} not found")
    return product


def _check_references(db: Session, category_id: Optional[int], co_client_id: Optional[int]):
    if category_id is not None and not db.get(Category, category_id):
        raise HTTPException(status_code=404, detail=f"Category with ID {category_id} not found")
    if co_client_id is not None and not db.get(CoClient, co_client_id):
        raise HTTPException(status_code=404, detail=f"CoClient with ID {co_client_id} not found")


def _person(p) -> str:
    return f"{p.first_name} {p.last_name}" if p else ""


# =========================
# CREATE
# =========================
@router.post("", response_model=ProductOut, status_code=201)
def create_product(
    payload: ProductCreate, request: Request,
    db: Session = Depends(get_db), current_user: User = Depends(get_current_user),
):
    _check_references(db, payload.category_id, payload.co_client_id)

    product = Product()
    apply_pricing(product, payload.model_dump())
    db.add(product)
    db.commit()
    db.refresh(product)

    write_log(db, user_id=current_user.id, action="PRODUCT_CREATE", resource="products",
              ip=client_ip(request), meta={"id": product.id, "gain": product.gain})
    return _get_product_or_404(db, product.id)


# =========================
# LISTA PRODUKTÓW
# =========================
@router.get("", response_model=ProductPage)
def list_products(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1),
    search: Optional[str] = Query(None, description="Search by name or description"),
    category_id: Optional[int] = Query(None, alias="categoryId"),
    co_client_id: Optional[int] = Query(None, alias="coClientId"),
    is_depot: Optional[bool] = Query(None, alias="isDepot"),
    min_price: Optional[float] = Query(None, alias="minPrice", ge=0),
    max_price: Optional[float] = Query(None, alias="maxPrice", ge=0),
    db: Session = Depends(get_db),
):
    query = _with_relations(db.query(Product))

    if search:
        like = f"%{search}%"
        query = query.filter(or_(Product.name.ilike(like), Product.description.ilike(like)))
    if category_id is not None:
        query = query.filter(Product.category_id == category_id)
    if co_client_id is not None:
        query = query.filter(Product.co_client_id == co_client_id)
    if is_depot is not None:
        query = query.filter(Product.is_depot == is_depot)
    if min_price is not None:
        query = query.filter(Product.sale_price >= min_price)
    if max_price is not None:
        query = query.filter(Product.sale_price <= max_price)

    query = query.order_by(Product.created_at.desc(), Product.id.desc())
    return paginate(query, page, limit)


# =========================
# EXPORTS
# =========================
def _export_rows(db: Session):
    return (
        db.query(Product)
        .options(selectinload(Product.category), selectinload(Product.co_client))
        .order_by(Product.created_at.desc(), Product.id.desc())
        .limit(EXPORT_LIMIT)
        .all()
    )


@router.get("/export/csv")
def export_products_csv(db: Session = Depends(get_db)):
    try:
        records = [
            {
                "ID": p.id,
                "Nom Produit": p.name,
                "Description": p.description or "",
                "Prix Vente": p.sale_price,
                "Prix Achat": p.purchase_price if p.purchase_price is not None else "",
                "Quantité Stock": p.stock_quantity,
                "En Dépôt": "Oui" if p.is_depot else "Non",
                "Pourcentage Dépôt": p.depot_percentage if p.depot_percentage is not None else "",
                "Surcharge": p.surcharge,
                "Gain": p.gain,
                "Statut": "Disponible" if p.is_available else "Rupture",
                "Catégorie": p.category.name if p.category else "",
                "Co-Client": _person(p.co_client),
                "Date Création": fr_date(p.created_at),
            }
            for p in _export_rows(db)
        ]
        return csv_response(records, CSV_COLUMNS, "products.csv")
    except Exception as e:
        return export_error("CSV", e)


@router.get("/export/pdf")
def export_products_pdf(db: Session = Depends(get_db)):
    try:
        rows = [
            [
                p.id,
                p.name,
                p.category.name if p.category else "",
                f"{p.sale_price:.2f}",
                "Oui" if p.is_depot else "Non",
                f"{p.gain:.2f}",
                "Disponible" if p.is_available else "Rupture",
            ]
            for p in _export_rows(db)
        ]
        content = render_table_pdf(
            "Rapport des Produits",
            ["ID", "Produit", "Catégorie", "Prix", "Dépôt", "Gain", "Statut"],
            [12, 55, 35, 22, 16, 22, 20],
            rows,
        )
        return pdf_response(content, "products.pdf")
    except Exception as e:
        return export_error("PDF", e)


@router.get("/{product_id}", response_model=ProductOut)
def get_product(product_id: int, db: Session = Depends(get_db)):
    return _get_product_or_404(db, product_id)


# =========================
# UPDATE
# =========================
@router.patch("/{product_id}", response_model=ProductOut)
def update_product(
    product_id: int, payload: ProductUpdate, request: Request,
    db: Session = Depends(get_db), current_user: User = Depends(get_current_user),
):
    product = _get_product_or_404(db, product_id)
    changes = payload.model_dump(exclude_unset=True)
    # Nullable columns may be cleared explicitly, the others keep their value
    nullable = {"description", "purchase_price", "depot_percentage", "co_client_id"}
    changes = {k: v for k, v in changes.items() if v is not None or k in nullable}

    _check_references(db, changes.get("category_id"), changes.get("co_client_id"))

    old_gain = product.gain
    apply_pricing(product, changes)
    db.commit()

    write_log(db, user_id=current_user.id, action="PRODUCT_UPDATE", resource="products",
              ip=client_ip(request),
              meta={"id": product_id, "fields": sorted(changes), "gain": [old_gain, product.gain]})
    return _get_product_or_404(db, product_id)


# =========================
# DELETE
# =========================
@router.delete("/{product_id}", response_model=MessageResponse)
def delete_product(
    product_id: int, request: Request,
    db: Session = Depends(get_db), current_user: User = Depends(get_current_user),
):
    product = _get_product_or_404(db, product_id)
    try:
        db.delete(product)
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=409, detail="Product is part of existing commands")
    write_log(db, user_id=current_user.id, action="PRODUCT_DELETE", resource="products",
              ip=client_ip(request), meta={"id": product_id})
    logger.info("Product %s deleted by user %s", product_id, current_user.id)
    return {"message": "Product deleted successfully"}
