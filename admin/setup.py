# admin/setup.py
from flask import redirect, url_for
from flask_login import current_user, logout_user
from flask_admin import Admin, AdminIndexView, expose
from flask_admin.contrib.sqla import ModelView
from flask_admin.menu import MenuLink
from flask_admin.theme import Bootstrap4Theme
from configs import db
from db.models.user import UserRole


def _is_admin() -> bool:
    return current_user.is_authenticated and current_user.has_role(UserRole.ADMIN)


class MyAdminIndex(AdminIndexView):
    @expose("/")
    def index(self):
        if not _is_admin():
            return redirect(url_for("main.home"))
        return super().index()

    @expose("/logout")
    def admin_logout(self):
        if current_user.is_authenticated:
            logout_user()
        return redirect(url_for("main.home"))

    def is_accessible(self):
        return _is_admin()

    def inaccessible_callback(self, name, **kwargs):
        return redirect(url_for("main.home"))


class SecureModelView(ModelView):
    can_view_details = True
    can_export = True

    def is_accessible(self):
        return _is_admin()

    def inaccessible_callback(self, name, **kwargs):
        return redirect(url_for("main.home"))


class ReadOnlyView(SecureModelView):
    """Documents driven by workflows; edits go through the API."""

    can_create = False
    can_edit = False
    can_delete = False


class UserView(SecureModelView):
    column_exclude_list = ["password_hash"]
    column_details_exclude_list = ["password_hash"]
    form_excluded_columns = ["password_hash"]
    column_searchable_list = ["username", "full_name", "email"]
    column_filters = ["role", "is_active"]


class ProductView(SecureModelView):
    column_searchable_list = ["sku", "name"]
    column_filters = ["is_active", "category_id"]
    column_list = ["id", "sku", "name", "category", "unit", "default_price", "min_stock_level", "is_active"]
    form_excluded_columns = ["attrs", "inventory", "created_at"]


class BatchView(ReadOnlyView):
    column_searchable_list = ["batch_number"]
    column_filters = ["status", "product_id", "warehouse_id", "received_date"]
    column_list = [
        "id",
        "batch_number",
        "product",
        "warehouse",
        "quantity",
        "total_cost",
        "cost_per_unit",
        "status",
        "received_date",
    ]


class PurchaseOrderView(ReadOnlyView):
    column_searchable_list = ["order_number"]
    column_filters = ["status", "order_date", "supplier_id"]
    column_list = ["id", "order_number", "supplier", "warehouse", "order_date", "status", "total_amount"]


class SalesOrderView(ReadOnlyView):
    column_searchable_list = ["order_number"]
    column_filters = ["status", "order_date", "customer_id"]
    column_list = ["id", "order_number", "customer", "warehouse", "order_date", "status", "total_amount", "total_cost"]


class JournalEntryView(ReadOnlyView):
    column_searchable_list = ["entry_number", "description"]
    column_filters = ["status", "entry_date", "reference_type"]
    column_list = ["id", "entry_number", "entry_date", "description", "status", "total_debit", "total_credit"]


def init_admin(app):

    admin = Admin(
        app,
        name="Import ERP Admin",
        theme=Bootstrap4Theme(),
        index_view=MyAdminIndex(url="/manage"),
        url="/manage",
    )
    # models imported here to avoid a circular import through configs
    from db.models.user import User
    from db.models.product import Product, ProductCategory
    from db.models.customer import Customer
    from db.models.supplier import Supplier
    from db.models.warehouse import Warehouse
    from db.models.cost_item_type import CostItemType
    from db.models.batch import Batch
    from db.models.inventory import Inventory
    from db.models.transfer import InventoryTransfer
    from db.models.purchase import PurchaseOrder
    from db.models.sales import SalesOrder
    from db.models.accounting import (
        AccountPayable,
        AccountReceivable,
        ChartOfAccount,
        JournalEntry,
    )
    from db.models.setting import SystemSetting

    views = [
        (UserView, User, "System", "Users"),
        (SecureModelView, SystemSetting, "System", "Settings"),
        (ProductView, Product, "Master Data", "Products"),
        (SecureModelView, ProductCategory, "Master Data", "Categories"),
        (SecureModelView, Customer, "Master Data", "Customers"),
        (SecureModelView, Supplier, "Master Data", "Suppliers"),
        (SecureModelView, Warehouse, "Master Data", "Warehouses"),
        (SecureModelView, CostItemType, "Master Data", "Cost Item Types"),
        (BatchView, Batch, "Inventory", "Batches"),
        (ReadOnlyView, Inventory, "Inventory", "Stock"),
        (ReadOnlyView, InventoryTransfer, "Inventory", "Transfers"),
        (PurchaseOrderView, PurchaseOrder, "Orders", "Purchase Orders"),
        (SalesOrderView, SalesOrder, "Orders", "Sales Orders"),
        (SecureModelView, ChartOfAccount, "Accounting", "Chart of Accounts"),
        (JournalEntryView, JournalEntry, "Accounting", "Journal Entries"),
        (ReadOnlyView, AccountReceivable, "Accounting", "Receivables"),
        (ReadOnlyView, AccountPayable, "Accounting", "Payables"),
    ]
    for view_cls, model, category, name in views:
        admin.add_view(
            view_cls(
                model,
                db.session,
                category=category,
                endpoint=f"admin_{model.__tablename__}",
                name=name,
            )
        )

    admin.add_link(
        MenuLink(
            name="Logout",
            category="System",
            endpoint="admin.admin_logout",
        )
    )

    return admin
