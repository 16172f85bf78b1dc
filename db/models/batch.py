from datetime import datetime
from configs import db
from utils.workflow import StatusEnum


class BatchStatus(StatusEnum):
    DRAFT = "DRAFT"
    CONFIRMED = "CONFIRMED"
    CANCELLED = "CANCELLED"

    @classmethod
    def _transitions(cls):
        return {
            cls.DRAFT: {cls.CONFIRMED, cls.CANCELLED},
            cls.CONFIRMED: {cls.CANCELLED},
        }


class Batch(db.Model):
    __tablename__ = "batch"

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    batch_number = db.Column(db.String(40), unique=True, nullable=False)

    product_id = db.Column(db.Integer, db.ForeignKey("product.id"), nullable=False)
    supplier_id = db.Column(db.Integer, db.ForeignKey("supplier.id"))
    warehouse_id = db.Column(db.Integer, db.ForeignKey("warehouse.id"), nullable=False)
    purchase_order_id = db.Column(db.Integer, db.ForeignKey("purchase_order.id"))

    quantity = db.Column(db.Numeric(18, 3), nullable=False)
    unit_purchase_cost = db.Column(db.Numeric(18, 4), nullable=False)
    total_purchase_cost = db.Column(db.Numeric(18, 2), nullable=False, default=0)
    total_landed_cost = db.Column(db.Numeric(18, 2), nullable=False, default=0)
    total_cost = db.Column(db.Numeric(18, 2), nullable=False, default=0)
    cost_per_unit = db.Column(db.Numeric(18, 4), nullable=False, default=0)
    currency = db.Column(db.String(3), default="USD", nullable=False)

    status = db.Column(
        db.Enum(BatchStatus, name="batchstatus"),
        default=BatchStatus.DRAFT,
        nullable=False,
    )
    received_date = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    notes = db.Column(db.Text)

    confirmed_at = db.Column(db.DateTime)
    confirmed_by_id = db.Column(db.Integer, db.ForeignKey("user_account.id"))
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    product = db.relationship("Product")
    supplier = db.relationship("Supplier")
    warehouse = db.relationship("Warehouse")
    purchase_order = db.relationship("PurchaseOrder", backref="batches")
    confirmed_by = db.relationship("User")
    landed_cost_items = db.relationship(
        "LandedCostItem",
        backref="batch",
        cascade="all, delete-orphan",
        order_by="LandedCostItem.id",
    )

    @property
    def is_locked(self) -> bool:
        return self.status != BatchStatus.DRAFT


class LandedCostItem(db.Model):
    __tablename__ = "landed_cost_item"

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    batch_id = db.Column(
        db.Integer, db.ForeignKey("batch.id", ondelete="CASCADE"), nullable=False
    )
    cost_type_id = db.Column(
        db.Integer, db.ForeignKey("cost_item_type.id"), nullable=False
    )
    amount = db.Column(db.Numeric(18, 2), nullable=False)
    currency = db.Column(db.String(3), nullable=False)
    exchange_rate = db.Column(db.Numeric(18, 6), default=1, nullable=False)
    amount_in_batch_currency = db.Column(db.Numeric(18, 2), nullable=False)
    description = db.Column(db.Text)
    reference_number = db.Column(db.String(100))
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    cost_type = db.relationship("CostItemType")
