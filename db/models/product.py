from datetime import datetime
from configs import db
from sqlalchemy.dialects.postgresql import JSONB


class ProductCategory(db.Model):
    __tablename__ = "product_category"

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    name = db.Column(db.String(120), unique=True, nullable=False)
    description = db.Column(db.Text)
    parent_id = db.Column(db.Integer, db.ForeignKey("product_category.id"))
    is_active = db.Column(db.Boolean, default=True)

    parent = db.relationship("ProductCategory", remote_side=[id], backref="children")


class Product(db.Model):
    __tablename__ = "product"

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    sku = db.Column(db.String(60), unique=True, nullable=False)
    name = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text)

    category_id = db.Column(db.Integer, db.ForeignKey("product_category.id"))
    category = db.relationship("ProductCategory", backref="products")

    unit = db.Column(db.String(20), default="PCS", nullable=False)
    default_price = db.Column(db.Numeric(18, 2), default=0)
    min_stock_level = db.Column(db.Numeric(18, 3), default=0)

    # JSONB on postgres, plain JSON elsewhere (sqlite in tests)
    attrs = db.Column(db.JSON().with_variant(JSONB, "postgresql"), default=dict)
    is_active = db.Column(db.Boolean, default=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
