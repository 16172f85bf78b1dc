# seed.py
from configs import db
from dao import accounting as acc_dao
from dao import cost_item_type as cit_dao
from dao import settings as settings_dao
from db.models.customer import Customer
from db.models.product import Product, ProductCategory
from db.models.supplier import Supplier
from db.models.warehouse import Warehouse
from app import create_app


# -------- Warehouses --------
def seed_warehouses():
    warehouses = [
        ("WH-MAIN", "Main Warehouse", "Lot 12, Tan Thuan EPZ, District 7", True),
        ("WH-NORTH", "Northern Depot", "Km 8, National Road 5, Hai Phong", False),
    ]
    for code, name, address, is_default in warehouses:
        if not Warehouse.query.filter_by(code=code).first():
            db.session.add(
                Warehouse(code=code, name=name, address=address, is_default=is_default)
            )
    db.session.commit()
    print("✓ Warehouses seeded")


# -------- Partners --------
def seed_suppliers():
    suppliers = [
        Supplier(
            code="SUP001",
            name="Shenzhen Brightline Electronics",
            country="China",
            currency="USD",
            payment_terms=45,
            email="sales@brightline.example",
        ),
        Supplier(
            code="SUP002",
            name="Osaka Precision Tools",
            country="Japan",
            currency="JPY",
            payment_terms=30,
            email="export@osakatools.example",
        ),
        Supplier(
            code="SUP003",
            name="Hamburg Kitchenware GmbH",
            country="Germany",
            currency="EUR",
            payment_terms=60,
            email="orders@hamburg-kw.example",
        ),
    ]
    for s in suppliers:
        if not Supplier.query.filter_by(code=s.code).first():
            db.session.add(s)
    db.session.commit()
    print("✓ Suppliers seeded")


def seed_customers():
    customers = [
        Customer(code="CUS001", name="Saigon Retail Co.", city="Ho Chi Minh City", credit_limit=50000),
        Customer(code="CUS002", name="Hanoi Home Store", city="Hanoi", credit_limit=20000),
        Customer(code="CUS003", name="Da Nang Trading", city="Da Nang", payment_terms=15),
    ]
    for c in customers:
        if not Customer.query.filter_by(code=c.code).first():
            db.session.add(c)
    db.session.commit()
    print("✓ Customers seeded")


# -------- Products --------
def seed_products():
    categories = ["Electronics", "Tools", "Kitchenware"]
    by_name = {}
    for name in categories:
        c = ProductCategory.query.filter_by(name=name).first()
        if not c:
            c = ProductCategory(name=name)
            db.session.add(c)
        by_name[name] = c
    db.session.flush()

    products = [
        # sku, name, category, unit, price, min stock, attrs
        ("EL-USBC-HUB", "USB-C Hub 7-in-1", "Electronics", "PCS", 39.00, 50, {"hs_code": "8473.30"}),
        ("EL-PWR-65W", "65W GaN Charger", "Electronics", "PCS", 29.00, 80, {"hs_code": "8504.40"}),
        ("TL-TORQ-20", "Torque Wrench 20-100Nm", "Tools", "PCS", 85.00, 10, {"origin": "JP"}),
        ("KW-PAN-28", "Cast Iron Pan 28cm", "Kitchenware", "PCS", 55.00, 20, {"origin": "DE"}),
    ]
    for sku, name, category, unit, price, min_stock, attrs in products:
        p = Product.query.filter_by(sku=sku).first()
        if not p:
            db.session.add(
                Product(
                    sku=sku,
                    name=name,
                    category_id=by_name[category].id,
                    unit=unit,
                    default_price=price,
                    min_stock_level=min_stock,
                    attrs=attrs,
                    is_active=True,
                )
            )
        else:
            p.name = name
            p.attrs = attrs
    db.session.commit()
    print("✓ Products seeded/updated")


if __name__ == "__main__":
    app = create_app()
    with app.app_context():
        db.create_all()
        seed_warehouses()
        seed_suppliers()
        seed_customers()
        seed_products()
        cit_dao.seed_defaults()
        print("✓ Cost item types seeded")
        settings_dao.seed_settings()
        print("✓ Settings seeded")
        result = acc_dao.seed_chart()
        print(f"✓ Chart of accounts seeded ({result['accounts_created']} accounts)")
        print("✅ Seed data ready")
