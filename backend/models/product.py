# backend/models/product.py
from sqlalchemy import (
    Column, Integer, String, Float, Boolean, ForeignKey, DateTime, CheckConstraint, func
)
from sqlalchemy.orm import relationship
from database import Base

# Model Product
# A sellable article: either bought by the shop (owned stock, purchase_price set)
# or left in consignment by a co-client (is_depot, depot_percentage set).
# `gain` is never written by callers directly, see services.pricing.
class Product(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False, index=True)
    description = Column(String, nullable=True)

    # Prices are checked at the database level as well.
    sale_price = Column(Float, CheckConstraint("sale_price >= 0"), nullable=False)
    purchase_price = Column(Float, CheckConstraint("purchase_price >= 0"), nullable=True)
    stock_quantity = Column(Integer, nullable=False, default=0)

    is_depot = Column(Boolean, nullable=False, default=False, index=True)
    depot_percentage = Column(
        Float, CheckConstraint("depot_percentage >= 0 AND depot_percentage <= 100"), nullable=True
    )
    surcharge = Column(Float, CheckConstraint("surcharge >= 0"), nullable=False, default=0)
    gain = Column(Float, nullable=False, default=0)

    # False once a command containing the product has been delivered.
    is_available = Column(Boolean, nullable=False, default=True)

    category_id = Column(Integer, ForeignKey("categories.id", ondelete="RESTRICT"), nullable=False, index=True)
    co_client_id = Column(Integer, ForeignKey("co_clients.id", ondelete="SET NULL"), nullable=True, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)

    category = relationship("Category", back_populates="products")
    co_client = relationship("CoClient", back_populates="products")
    photos = relationship(
        "ProductPhoto",
        back_populates="product",
        cascade="all, delete-orphan",
        order_by="ProductPhoto.id",
    )
    command_details = relationship("CommandDetail", back_populates="product")

    @property
    def is_sold(self) -> bool:
        from models.command import SOLD_STATUSES
        return any(d.command is not None and d.command.status in SOLD_STATUSES for d in self.command_details)


class ProductPhoto(Base):
    __tablename__ = "product_photos"

    id = Column(Integer, primary_key=True, index=True)
    product_id = Column(Integer, ForeignKey("products.id", ondelete="CASCADE"), nullable=False, index=True)
    # Relative URL of the stored file (/uploads/...) or a legacy data URI
    photo_doc = Column(String, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    product = relationship("Product", back_populates="photos")
