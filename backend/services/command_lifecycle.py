# backend/services/command_lifecycle.py
"""
Command (order) lifecycle.

Statuses move NOT_DELIVERED -> DELIVERED -> GOT_PROFIT. Entering DELIVERED or
GOT_PROFIT withdraws every product of the command from sellable stock
(is_available = False). Moving back is accepted unless
settings.ENFORCE_FORWARD_STATUS is set, and never puts products back on sale.
"""
import logging
from typing import Callable, Dict, Iterable, List, Optional

from sqlalchemy.orm import Session

from config import settings
from models.client import Client, CoClient
from models.command import Command, CommandDetail, CommandStatus
from models.product import Product
from schemas.command import CommandCreate, CommandUpdate

logger = logging.getLogger(__name__)


class ReferenceNotFoundError(LookupError):
    """A product/client/co-client id sent with a command does not exist."""

    def __init__(self, entity: str, ids: Iterable[int]):
        self.entity = entity
        self.ids = sorted(set(ids))
        joined = ", ".join(str(i) for i in self.ids)
        super().__init__(f"{entity} with ID {joined} not found")


class StatusTransitionError(ValueError):
    pass


# Forward edges of the state machine
TRANSITIONS: Dict[CommandStatus, Optional[CommandStatus]] = {
    CommandStatus.NOT_DELIVERED: CommandStatus.DELIVERED,
    CommandStatus.DELIVERED: CommandStatus.GOT_PROFIT,
    CommandStatus.GOT_PROFIT: None,
}


def is_backward(current: CommandStatus, target: CommandStatus) -> bool:
    """True when `target` cannot be reached from `current` by forward edges."""
    if target == current:
        return False
    step = TRANSITIONS[current]
    while step is not None:
        if step == target:
            return False
        step = TRANSITIONS[step]
    return True


def withdraw_products(db: Session, command: Command) -> int:
    """Mark the command's products as no longer available. Returns rows changed."""
    product_ids = command.product_ids
    if not product_ids:
        return 0
    changed = (
        db.query(Product)
        .filter(Product.id.in_(product_ids), Product.is_available == True)  # noqa: E712
        .update({Product.is_available: False}, synchronize_session="fetch")
    )
    return changed


# Effects run when a command enters the given status
ENTRY_EFFECTS: Dict[CommandStatus, List[Callable[[Session, Command], int]]] = {
    CommandStatus.NOT_DELIVERED: [],
    CommandStatus.DELIVERED: [withdraw_products],
    CommandStatus.GOT_PROFIT: [withdraw_products],
}


def transition(db: Session, command: Command, target: CommandStatus) -> None:
    """
    Move `command` to `target` and run the entry effects of `target`.

    Effects also run when the status does not change. They are idempotent.
    """
    current = command.status or CommandStatus.NOT_DELIVERED
    if is_backward(current, target):
        if settings.ENFORCE_FORWARD_STATUS:
            raise StatusTransitionError(
                f"Cannot move command {command.id} from {current.value} back to {target.value}"
            )
        # Products already withdrawn stay withdrawn
        logger.warning(
            "Command %s moved back from %s to %s, products are not restocked",
            command.id, current.value, target.value,
        )

    command.status = target
    for effect in ENTRY_EFFECTS[target]:
        changed = effect(db, command)
        if changed:
            logger.info("Command %s -> %s: %s product(s) withdrawn", command.id, target.value, changed)


def _missing(db: Session, model, ids: Iterable[int]) -> List[int]:
    wanted = set(ids)
    found = {row[0] for row in db.query(model.id).filter(model.id.in_(wanted)).all()}
    return sorted(wanted - found)


def create_command(db: Session, payload: CommandCreate) -> Command:
    """
    Persist the command header and one detail row per product in a single
    transaction. Nothing is written if a referenced id is unknown or a row
    fails to insert.
    """
    missing = _missing(db, Product, payload.product_ids)
    if missing:
        raise ReferenceNotFoundError("Product", missing)
    if not db.get(Client, payload.client_id):
        raise ReferenceNotFoundError("Client", [payload.client_id])
    if payload.co_client_id is not None and not db.get(CoClient, payload.co_client_id):
        raise ReferenceNotFoundError("CoClient", [payload.co_client_id])

    products = db.query(Product).filter(Product.id.in_(payload.product_ids)).all()
    by_id = {p.id: p for p in products}
    ordered = [by_id[pid] for pid in payload.product_ids]

    products_number = payload.products_number
    if products_number is None:
        products_number = len(payload.product_ids)
    sale_price = payload.sale_price
    if sale_price is None:
        sale_price = round(sum(p.sale_price or 0.0 for p in ordered), 2)
    purchase_price = payload.purchase_price
    if purchase_price is None:
        purchase_price = round(sum(p.purchase_price or 0.0 for p in ordered), 2)

    try:
        command = Command(
            products_number=products_number,
            sale_price=sale_price,
            purchase_price=purchase_price,
            status=CommandStatus.NOT_DELIVERED,
            delivery_address=payload.delivery_address,
            delivery_date=payload.delivery_date,
        )
        command.details = [
            CommandDetail(product_id=pid, client_id=payload.client_id, co_client_id=payload.co_client_id)
            for pid in payload.product_ids
        ]
        db.add(command)
        db.flush()

        # A command created directly as delivered withdraws its products too
        if payload.status != CommandStatus.NOT_DELIVERED:
            transition(db, command, payload.status)

        db.commit()
    except Exception:
        db.rollback()
        raise

    db.refresh(command)
    return command


def update_command(db: Session, command: Command, patch: CommandUpdate) -> Command:
    changes = patch.model_dump(exclude_unset=True)
    status = changes.pop("status", None)
    # An explicit null only clears the delivery date, other columns are required
    changes = {k: v for k, v in changes.items() if v is not None or k == "delivery_date"}

    try:
        for key, value in changes.items():
            setattr(command, key, value)
        if status is not None:
            transition(db, command, status)
        db.commit()
    except Exception:
        db.rollback()
        raise

    db.refresh(command)
    return command


def delete_command(db: Session, command: Command) -> None:
    """Hard delete. Withdrawn products stay unavailable."""
    db.delete(command)
    db.commit()
