from datetime import datetime
from configs import db


class Supplier(db.Model):
    __tablename__ = "supplier"

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    code = db.Column(db.String(50), unique=True, nullable=False)
    name = db.Column(db.String(255), nullable=False)

    contact_person = db.Column(db.String(120))
    phone = db.Column(db.String(30))
    email = db.Column(db.String(255))
    address = db.Column(db.Text)
    country = db.Column(db.String(80))
    tax_id = db.Column(db.String(50))

    currency = db.Column(db.String(3), default="USD", nullable=False)
    payment_terms = db.Column(db.Integer, default=30, nullable=False)  # days
    notes = db.Column(db.Text)

    is_active = db.Column(db.Boolean, default=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
