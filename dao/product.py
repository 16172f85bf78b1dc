# dao/product.py
import logging
from typing import List, Optional

from sqlalchemy import or_

from configs import db
from dao import _tx
from db.models.batch import Batch
from db.models.inventory import Inventory
from db.models.product import Product, ProductCategory
from db.models.purchase import PurchaseOrderItem
from db.models.sales import SalesOrderItem
from utils.errors import BadRequest, Conflict, PreconditionFailed
from utils.money import d
from utils.pagination import paginate

logger = logging.getLogger(__name__)

_PRODUCT_FIELDS = (
    "sku",
    "name",
    "description",
    "category_id",
    "unit",
    "default_price",
    "min_stock_level",
    "attrs",
    "is_active",
)


# ---------------- products ----------------
def list_products(
    search: str | None = None,
    category_id: int | None = None,
    is_active: bool | None = None,
    page: int = 1,
    page_size: int = 20,
) -> dict:
    q = Product.query
    if search:
        like = f"%{search.strip()}%"
        q = q.filter(or_(Product.sku.ilike(like), Product.name.ilike(like)))
    if category_id:
        q = q.filter(Product.category_id == int(category_id))
    if is_active is not None:
        q = q.filter(Product.is_active == bool(is_active))
    return paginate(q.order_by(Product.name.asc()), page, page_size)


def list_active_products() -> List[Product]:
    return Product.query.filter_by(is_active=True).order_by(Product.name.asc()).all()


def get_product(product_id: int) -> Product:
    return _tx.fetch(Product, product_id, "Product")


def get_product_by_sku(sku: str) -> Optional[Product]:
    return Product.query.filter_by(sku=sku.strip()).one_or_none()


def _check_category(category_id):
    if category_id is not None and db.session.get(ProductCategory, int(category_id)) is None:
        raise BadRequest("Product category not found")


def _apply(p: Product, fields: dict) -> None:
    for k in _PRODUCT_FIELDS:
        if k not in fields:
            continue
        v = fields[k]
        if k in ("default_price", "min_stock_level"):
            v = d(v)
        elif k == "sku":
            v = v.strip()
        setattr(p, k, v)


def create_product(**fields) -> Product:
    sku = fields["sku"].strip()
    if get_product_by_sku(sku):
        raise Conflict("Product with this SKU already exists")
    _check_category(fields.get("category_id"))

    p = Product(attrs={})
    _apply(p, fields)
    db.session.add(p)
    _tx.commit()
    logger.info("product %s created", p.sku)
    return p


def update_product(product_id: int, **fields) -> Product:
    p = get_product(product_id)
    if "sku" in fields and fields["sku"].strip() != p.sku:
        if get_product_by_sku(fields["sku"]):
            raise Conflict("Product with this SKU already exists")
    if "category_id" in fields:
        _check_category(fields["category_id"])
    _apply(p, fields)
    _tx.commit()
    return p


def toggle_product_active(product_id: int) -> Product:
    p = get_product(product_id)
    p.is_active = not p.is_active
    _tx.commit()
    return p


def delete_product(product_id: int) -> None:
    p = get_product(product_id)
    in_use = (
        Inventory.query.filter_by(product_id=p.id).count()
        + Batch.query.filter_by(product_id=p.id).count()
        + PurchaseOrderItem.query.filter_by(product_id=p.id).count()
        + SalesOrderItem.query.filter_by(product_id=p.id).count()
    )
    if in_use:
        raise PreconditionFailed(
            "Cannot delete product with inventory, batches or order lines. "
            "Deactivate it instead."
        )
    db.session.delete(p)
    _tx.commit()
    logger.info("product %s deleted", p.sku)


# ---------------- categories ----------------
def list_categories() -> List[ProductCategory]:
    return ProductCategory.query.order_by(ProductCategory.name.asc()).all()


def _check_category_name(name: str, exclude_id: int | None = None) -> None:
    q = ProductCategory.query.filter(ProductCategory.name == name)
    if exclude_id:
        q = q.filter(ProductCategory.id != exclude_id)
    if db.session.query(q.exists()).scalar():
        raise Conflict("Category with this name already exists")


def create_category(
    name: str, description: str | None = None, parent_id: int | None = None
) -> ProductCategory:
    name = name.strip()
    _check_category_name(name)
    _check_category(parent_id)
    c = ProductCategory(name=name, description=description, parent_id=parent_id)
    db.session.add(c)
    _tx.commit()
    return c


def update_category(category_id: int, **fields) -> ProductCategory:
    c = _tx.fetch(ProductCategory, category_id, "Category")
    if "name" in fields and fields["name"] is not None:
        fields["name"] = fields["name"].strip()
        _check_category_name(fields["name"], exclude_id=c.id)
    if fields.get("parent_id") is not None:
        if int(fields["parent_id"]) == c.id:
            raise BadRequest("Category cannot be its own parent")
        _check_category(fields["parent_id"])
    for k in ("name", "description", "parent_id", "is_active"):
        if k in fields:
            setattr(c, k, fields[k])
    _tx.commit()
    return c


def delete_category(category_id: int) -> None:
    c = _tx.fetch(ProductCategory, category_id, "Category")
    if Product.query.filter_by(category_id=c.id).count():
        raise BadRequest("Cannot delete category with products")
    if ProductCategory.query.filter_by(parent_id=c.id).count():
        raise BadRequest("Cannot delete category with subcategories")
    db.session.delete(c)
    _tx.commit()
