from datetime import datetime
from configs import db


class Inventory(db.Model):
    __tablename__ = "inventory"
    __table_args__ = (
        db.UniqueConstraint(
            "product_id", "batch_id", "warehouse_id", name="uq_inventory_slot"
        ),
    )

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    product_id = db.Column(db.Integer, db.ForeignKey("product.id"), nullable=False)
    batch_id = db.Column(db.Integer, db.ForeignKey("batch.id"), nullable=False)
    warehouse_id = db.Column(db.Integer, db.ForeignKey("warehouse.id"), nullable=False)

    quantity = db.Column(db.Numeric(18, 3), default=0, nullable=False)
    reserved_quantity = db.Column(db.Numeric(18, 3), default=0, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    product = db.relationship("Product", backref="inventory")
    batch = db.relationship("Batch", backref="inventory")
    warehouse = db.relationship("Warehouse", backref="inventory")

    @property
    def available_quantity(self):
        return (self.quantity or 0) - (self.reserved_quantity or 0)
