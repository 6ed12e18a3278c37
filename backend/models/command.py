# backend/models/command.py
import enum
from sqlalchemy import Column, Integer, String, Float, ForeignKey, DateTime, Enum, CheckConstraint, func
from sqlalchemy.orm import relationship
from database import Base

# Delivery state of a command. Declared in lifecycle order.
class CommandStatus(str, enum.Enum):
    NOT_DELIVERED = "NOT_DELIVERED"
    DELIVERED = "DELIVERED"
    GOT_PROFIT = "GOT_PROFIT"

# A product belonging to a command in one of these states is considered sold
SOLD_STATUSES = {CommandStatus.DELIVERED, CommandStatus.GOT_PROFIT}

# Customer order ("commande"). Aggregated prices are stored on the header,
# the individual products live in CommandDetail rows.
class Command(Base):
    __tablename__ = "commands"

    id = Column(Integer, primary_key=True, index=True)
    products_number = Column(Integer, CheckConstraint("products_number >= 1"), nullable=False)
    sale_price = Column(Float, CheckConstraint("sale_price >= 0"), nullable=False)
    purchase_price = Column(Float, CheckConstraint("purchase_price >= 0"), nullable=False)
    status = Column(Enum(CommandStatus), default=CommandStatus.NOT_DELIVERED, nullable=False, index=True)
    delivery_address = Column(String, nullable=False)
    delivery_date = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)

    details = relationship(
        "CommandDetail",
        back_populates="command",
        cascade="all, delete-orphan",
        order_by="CommandDetail.id",
    )

    @property
    def product_ids(self):
        return [d.product_id for d in self.details]


class CommandDetail(Base):
    __tablename__ = "command_details"

    id = Column(Integer, primary_key=True, index=True)
    command_id = Column(Integer, ForeignKey("commands.id", ondelete="CASCADE"), nullable=False, index=True)
    product_id = Column(Integer, ForeignKey("products.id", ondelete="RESTRICT"), nullable=False, index=True)
    client_id = Column(Integer, ForeignKey("clients.id", ondelete="RESTRICT"), nullable=False, index=True)
    co_client_id = Column(Integer, ForeignKey("co_clients.id", ondelete="SET NULL"), nullable=True)

    command = relationship("Command", back_populates="details")
    product = relationship("Product", back_populates="command_details")
    client = relationship("Client", back_populates="command_details")
    co_client = relationship("CoClient", back_populates="command_details")
