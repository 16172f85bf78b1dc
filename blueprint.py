from index import main_bp
from routes.accounting import accounting_bp
from routes.auth import auth_bp
from routes.batch import batch_bp
from routes.cost_item_type import cost_item_type_bp
from routes.customer import customer_bp
from routes.inventory import inventory_bp
from routes.product import product_bp
from routes.purchase_order import purchase_bp
from routes.sales_order import sales_bp
from routes.supplier import supplier_bp
from routes.transfer import transfer_bp
from routes.warehouse import warehouse_bp


def blue_print(app):
    app.register_blueprint(main_bp)
    app.register_blueprint(auth_bp)
    app.register_blueprint(product_bp)
    app.register_blueprint(customer_bp)
    app.register_blueprint(supplier_bp)
    app.register_blueprint(warehouse_bp)
    app.register_blueprint(cost_item_type_bp)
    app.register_blueprint(batch_bp)
    app.register_blueprint(inventory_bp)
    app.register_blueprint(transfer_bp)
    app.register_blueprint(purchase_bp)
    app.register_blueprint(sales_bp)
    app.register_blueprint(accounting_bp)
