from configs import db
from datetime import datetime
from utils.workflow import StatusEnum


class SOStatus(StatusEnum):
    DRAFT = "DRAFT"
    CONFIRMED = "CONFIRMED"
    PROCESSING = "PROCESSING"
    SHIPPED = "SHIPPED"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"

    @classmethod
    def _transitions(cls):
        return {
            cls.DRAFT: {cls.CONFIRMED, cls.CANCELLED},
            cls.CONFIRMED: {cls.PROCESSING, cls.SHIPPED, cls.CANCELLED},
            cls.PROCESSING: {cls.PROCESSING, cls.SHIPPED, cls.CANCELLED},
            cls.SHIPPED: {cls.COMPLETED},
        }


class SalesOrder(db.Model):
    __tablename__ = "sales_order"

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    order_number = db.Column(db.String(40), unique=True, nullable=False)

    customer_id = db.Column(db.Integer, db.ForeignKey("customer.id"), nullable=False)
    customer = db.relationship("Customer", backref="sales_orders")
    warehouse_id = db.Column(db.Integer, db.ForeignKey("warehouse.id"), nullable=False)
    warehouse = db.relationship("Warehouse")

    status = db.Column(
        db.Enum(SOStatus, name="sostatus"), default=SOStatus.DRAFT, nullable=False
    )
    currency = db.Column(db.String(3), default="USD", nullable=False)
    order_date = db.Column(db.DateTime, default=datetime.utcnow)
    expected_ship_date = db.Column(db.DateTime)
    shipped_date = db.Column(db.DateTime)
    shipping_address = db.Column(db.Text)
    tracking_number = db.Column(db.String(100))
    notes = db.Column(db.Text)

    tax_rate = db.Column(db.Numeric(6, 4), default=0)
    shipping_fee = db.Column(db.Numeric(18, 2), default=0)
    subtotal = db.Column(db.Numeric(18, 2), default=0)
    tax_amount = db.Column(db.Numeric(18, 2), default=0)
    total_amount = db.Column(db.Numeric(18, 2), default=0)
    total_cost = db.Column(db.Numeric(18, 2), default=0)

    created_by_id = db.Column(db.Integer, db.ForeignKey("user_account.id"))
    confirmed_by_id = db.Column(db.Integer, db.ForeignKey("user_account.id"))
    confirmed_at = db.Column(db.DateTime)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    items = db.relationship(
        "SalesOrderItem",
        backref="order",
        cascade="all, delete-orphan",
        order_by="SalesOrderItem.id",
    )


class SalesOrderItem(db.Model):
    __tablename__ = "sales_order_item"

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    so_id = db.Column(
        db.Integer,
        db.ForeignKey("sales_order.id", ondelete="CASCADE"),
        nullable=False,
    )
    product_id = db.Column(db.Integer, db.ForeignKey("product.id"), nullable=False)

    quantity = db.Column(db.Numeric(18, 3), nullable=False)
    unit_price = db.Column(db.Numeric(18, 4), nullable=False)
    amount = db.Column(db.Numeric(18, 2), nullable=False)
    unit_cost = db.Column(db.Numeric(18, 4), default=0)
    cost_amount = db.Column(db.Numeric(18, 2), default=0)
    shipped_quantity = db.Column(db.Numeric(18, 3), default=0, nullable=False)
    notes = db.Column(db.Text)

    product = db.relationship("Product")
    allocations = db.relationship(
        "SalesOrderAllocation",
        backref="item",
        cascade="all, delete-orphan",
        order_by="SalesOrderAllocation.id",
    )

    @property
    def remaining_quantity(self):
        return (self.quantity or 0) - (self.shipped_quantity or 0)


class SalesOrderAllocation(db.Model):
    __tablename__ = "sales_order_allocation"

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    item_id = db.Column(
        db.Integer,
        db.ForeignKey("sales_order_item.id", ondelete="CASCADE"),
        nullable=False,
    )
    batch_id = db.Column(db.Integer, db.ForeignKey("batch.id"), nullable=False)
    inventory_id = db.Column(db.Integer, db.ForeignKey("inventory.id"), nullable=False)
    quantity = db.Column(db.Numeric(18, 3), nullable=False)
    cost_per_unit = db.Column(db.Numeric(18, 4), nullable=False)
    shipped_quantity = db.Column(db.Numeric(18, 3), default=0, nullable=False)

    batch = db.relationship("Batch")
    inventory = db.relationship("Inventory")

    @property
    def outstanding_quantity(self):
        return (self.quantity or 0) - (self.shipped_quantity or 0)
