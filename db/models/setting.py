from configs import db


class SystemSetting(db.Model):
    __tablename__ = "system_setting"

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    key = db.Column(db.String(64), unique=True, nullable=False)
    value = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text)
    is_system = db.Column(db.Boolean, default=False, nullable=False)


class NumberSeries(db.Model):
    """Per-day counter behind document numbers such as ``PO-20250101-0001``."""

    __tablename__ = "number_series"
    __table_args__ = (
        db.UniqueConstraint("key", "date_key", name="uq_number_series_key_date"),
    )

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    key = db.Column(db.String(20), nullable=False)
    date_key = db.Column(db.String(8), nullable=False)
    next_seq = db.Column(db.Integer, default=1, nullable=False)
