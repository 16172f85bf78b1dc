from configs import db
from datetime import datetime
from utils.workflow import StatusEnum


class POStatus(StatusEnum):
    DRAFT = "DRAFT"
    CONFIRMED = "CONFIRMED"
    PARTIAL = "PARTIAL"
    RECEIVED = "RECEIVED"
    CANCELLED = "CANCELLED"

    @classmethod
    def _transitions(cls):
        return {
            cls.DRAFT: {cls.CONFIRMED, cls.CANCELLED},
            cls.CONFIRMED: {cls.PARTIAL, cls.RECEIVED, cls.CANCELLED},
            cls.PARTIAL: {cls.PARTIAL, cls.RECEIVED, cls.CANCELLED},
        }


class PurchaseOrder(db.Model):
    __tablename__ = "purchase_order"

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    order_number = db.Column(db.String(40), unique=True, nullable=False)

    supplier_id = db.Column(db.Integer, db.ForeignKey("supplier.id"), nullable=False)
    supplier = db.relationship("Supplier", backref="purchase_orders")
    warehouse_id = db.Column(db.Integer, db.ForeignKey("warehouse.id"), nullable=False)
    warehouse = db.relationship("Warehouse")

    status = db.Column(
        db.Enum(POStatus, name="postatus"), default=POStatus.DRAFT, nullable=False
    )
    currency = db.Column(db.String(3), default="USD", nullable=False)
    order_date = db.Column(db.DateTime, default=datetime.utcnow)
    expected_date = db.Column(db.DateTime)
    notes = db.Column(db.Text)

    subtotal = db.Column(db.Numeric(18, 2), default=0)
    total_amount = db.Column(db.Numeric(18, 2), default=0)

    created_by_id = db.Column(db.Integer, db.ForeignKey("user_account.id"))
    confirmed_by_id = db.Column(db.Integer, db.ForeignKey("user_account.id"))
    confirmed_at = db.Column(db.DateTime)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    items = db.relationship(
        "PurchaseOrderItem",
        backref="po",
        cascade="all, delete-orphan",
        order_by="PurchaseOrderItem.id",
    )


class PurchaseOrderItem(db.Model):
    __tablename__ = "purchase_order_item"

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)

    po_id = db.Column(
        db.Integer,
        db.ForeignKey("purchase_order.id", ondelete="CASCADE"),
        nullable=False,
    )
    product_id = db.Column(db.Integer, db.ForeignKey("product.id"), nullable=False)

    quantity = db.Column(db.Numeric(18, 3), nullable=False)
    unit_price = db.Column(db.Numeric(18, 4), nullable=False)
    total_price = db.Column(db.Numeric(18, 2), nullable=False)
    received_quantity = db.Column(db.Numeric(18, 3), default=0, nullable=False)
    notes = db.Column(db.Text)

    product = db.relationship("Product")

    @property
    def remaining_quantity(self):
        return (self.quantity or 0) - (self.received_quantity or 0)
