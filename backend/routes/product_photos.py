# backend/routes/product_photos.py
from typing import List

from fastapi import APIRouter, Depends, File, Form, HTTPException, Request, UploadFile
from sqlalchemy.orm import Session

from database import get_db
from models.product import Product, ProductPhoto
from models.users import User
from schemas.common import MessageResponse
from schemas.product import ProductPhotoBatch, ProductPhotoBatchResult, ProductPhotoOut
from utils.audit import write_log, client_ip
from utils.tokenJWT import get_current_user
from utils.uploads import remove_stored_file, save_product_image

router = APIRouter(prefix="/product-photos", tags=["Product photos"], dependencies=[Depends(get_current_user)])


def _ensure_product(db: Session, product_id: int) -> Product:
    product = db.get(Product, product_id)
    if not product:
        raise HTTPException(status_code=404, detail=f"Product with ID {product_id} not found")
    return product


# =========================
# UPLOAD (multipart)
# =========================
@router.post("/upload", response_model=ProductPhotoOut, status_code=201)
def upload_product_photo(
    request: Request,
    file: UploadFile = File(...),
    product_id: int = Form(..., alias="productId"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    _ensure_product(db, product_id)

    photo_doc = save_product_image(file)
    photo = ProductPhoto(product_id=product_id, photo_doc=photo_doc)
    db.add(photo)
    db.commit()
    db.refresh(photo)

    write_log(db, user_id=current_user.id, action="PHOTO_UPLOAD", resource="product-photos",
              ip=client_ip(request), meta={"id": photo.id, "product_id": product_id, "path": photo_doc})
    return photo


# Older clients post already encoded images (data URIs) in one JSON body
@router.post("", response_model=ProductPhotoBatchResult, status_code=201)
def create_product_photos(
    payload: ProductPhotoBatch, request: Request,
    db: Session = Depends(get_db), current_user: User = Depends(get_current_user),
):
    _ensure_product(db, payload.product_id)
    db.add_all([ProductPhoto(product_id=payload.product_id, photo_doc=doc) for doc in payload.photo_docs])
    db.commit()

    write_log(db, user_id=current_user.id, action="PHOTO_BATCH", resource="product-photos",
              ip=client_ip(request), meta={"product_id": payload.product_id, "count": len(payload.photo_docs)})
    return {"count": len(payload.photo_docs)}


@router.get("/product/{product_id}", response_model=List[ProductPhotoOut])
def list_product_photos(product_id: int, db: Session = Depends(get_db)):
    _ensure_product(db, product_id)
    return (
        db.query(ProductPhoto)
        .filter(ProductPhoto.product_id == product_id)
        .order_by(ProductPhoto.created_at.asc(), ProductPhoto.id.asc())
        .all()
    )


@router.delete("/{photo_id}", response_model=MessageResponse)
def delete_product_photo(
    photo_id: int, request: Request,
    db: Session = Depends(get_db), current_user: User = Depends(get_current_user),
):
    photo = db.get(ProductPhoto, photo_id)
    if not photo:
        raise HTTPException(status_code=404, detail=f"ProductPhoto with ID {photo_id} not found")

    photo_doc = photo.photo_doc
    db.delete(photo)
    db.commit()
    remove_stored_file(photo_doc)

    write_log(db, user_id=current_user.id, action="PHOTO_DELETE", resource="product-photos",
              ip=client_ip(request), meta={"id": photo_id})
    return {"message": "Photo deleted successfully"}
