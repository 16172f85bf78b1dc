from datetime import datetime
from configs import db
from utils.workflow import StatusEnum


class TransferStatus(StatusEnum):
    DRAFT = "DRAFT"
    PENDING = "PENDING"
    IN_TRANSIT = "IN_TRANSIT"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"

    @classmethod
    def _transitions(cls):
        return {
            cls.DRAFT: {cls.PENDING, cls.CANCELLED},
            cls.PENDING: {cls.IN_TRANSIT, cls.CANCELLED},
            cls.IN_TRANSIT: {cls.COMPLETED, cls.CANCELLED},
        }


class InventoryTransfer(db.Model):
    __tablename__ = "inventory_transfer"

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    transfer_number = db.Column(db.String(40), unique=True, nullable=False)

    source_warehouse_id = db.Column(
        db.Integer, db.ForeignKey("warehouse.id"), nullable=False
    )
    target_warehouse_id = db.Column(
        db.Integer, db.ForeignKey("warehouse.id"), nullable=False
    )
    status = db.Column(
        db.Enum(TransferStatus, name="transferstatus"),
        default=TransferStatus.DRAFT,
        nullable=False,
    )
    notes = db.Column(db.Text)

    requested_by_id = db.Column(db.Integer, db.ForeignKey("user_account.id"))
    approved_by_id = db.Column(db.Integer, db.ForeignKey("user_account.id"))
    completed_by_id = db.Column(db.Integer, db.ForeignKey("user_account.id"))
    approved_at = db.Column(db.DateTime)
    completed_at = db.Column(db.DateTime)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    source_warehouse = db.relationship("Warehouse", foreign_keys=[source_warehouse_id])
    target_warehouse = db.relationship("Warehouse", foreign_keys=[target_warehouse_id])
    items = db.relationship(
        "TransferItem",
        backref="transfer",
        cascade="all, delete-orphan",
        order_by="TransferItem.id",
    )


class TransferItem(db.Model):
    __tablename__ = "transfer_item"

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    transfer_id = db.Column(
        db.Integer,
        db.ForeignKey("inventory_transfer.id", ondelete="CASCADE"),
        nullable=False,
    )
    product_id = db.Column(db.Integer, db.ForeignKey("product.id"), nullable=False)
    batch_id = db.Column(db.Integer, db.ForeignKey("batch.id"), nullable=False)
    quantity = db.Column(db.Numeric(18, 3), nullable=False)

    product = db.relationship("Product")
    batch = db.relationship("Batch")
