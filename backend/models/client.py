# backend/models/client.py
from sqlalchemy import Column, Integer, String, DateTime, func
from sqlalchemy.orm import relationship
from database import Base

# Buyer of a command
class Client(Base):
    __tablename__ = "clients"

    id = Column(Integer, primary_key=True, index=True)
    first_name = Column(String, nullable=False)
    last_name = Column(String, nullable=False, index=True)
    address = Column(String, nullable=False)
    email = Column(String, nullable=False, index=True)
    phone_number = Column(String, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)

    command_details = relationship("CommandDetail", back_populates="client")


# Consignor: brings goods in "dépôt" and receives a share of the sale.
# The RIB is the bank account used to pay that share back.
class CoClient(Base):
    __tablename__ = "co_clients"

    id = Column(Integer, primary_key=True, index=True)
    first_name = Column(String, nullable=False)
    last_name = Column(String, nullable=False, index=True)
    address = Column(String, nullable=False)
    email = Column(String, nullable=False, index=True)
    phone_number = Column(String, nullable=False)
    rib = Column(String, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)

    products = relationship("Product", back_populates="co_client")
    command_details = relationship("CommandDetail", back_populates="co_client")
