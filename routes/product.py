from flask import Blueprint

from dao import product as product_dao
from schemas.common import IdIn
from schemas.master import (
    CategoryIn,
    CategoryOut,
    CategoryUpdateIn,
    ProductIn,
    ProductListIn,
    ProductOut,
    ProductUpdateIn,
    SkuIn,
)
from utils.errors import NotFound
from utils.rpc import procedure

product_bp = Blueprint("product_api", __name__, url_prefix="/api/product")


@product_bp.post("/list")
@procedure(ProductListIn, ProductOut)
def product_list(data: ProductListIn):
    return product_dao.list_products(**data.model_dump())


@product_bp.post("/list_active")
@procedure(out=ProductOut)
def product_list_active():
    return product_dao.list_active_products()


@product_bp.post("/get_by_id")
@procedure(IdIn, ProductOut)
def product_get(data: IdIn):
    return product_dao.get_product(data.id)


@product_bp.post("/get_by_sku")
@procedure(SkuIn, ProductOut)
def product_get_by_sku(data: SkuIn):
    p = product_dao.get_product_by_sku(data.sku)
    if p is None:
        raise NotFound("Product not found")
    return p


@product_bp.post("/create")
@procedure(ProductIn, ProductOut)
def product_create(data: ProductIn):
    return product_dao.create_product(**data.model_dump())


@product_bp.post("/update")
@procedure(ProductUpdateIn, ProductOut)
def product_update(data: ProductUpdateIn):
    return product_dao.update_product(data.id, **data.data.model_dump(exclude_unset=True))


@product_bp.post("/delete")
@procedure(IdIn)
def product_delete(data: IdIn):
    product_dao.delete_product(data.id)
    return {"id": data.id}


@product_bp.post("/toggle_active")
@procedure(IdIn, ProductOut)
def product_toggle_active(data: IdIn):
    return product_dao.toggle_product_active(data.id)


# ---------------- categories ----------------
@product_bp.post("/list_categories")
@procedure(out=CategoryOut)
def category_list():
    return product_dao.list_categories()


@product_bp.post("/create_category")
@procedure(CategoryIn, CategoryOut)
def category_create(data: CategoryIn):
    return product_dao.create_category(**data.model_dump())


@product_bp.post("/update_category")
@procedure(CategoryUpdateIn, CategoryOut)
def category_update(data: CategoryUpdateIn):
    return product_dao.update_category(data.id, **data.data.model_dump(exclude_unset=True))


@product_bp.post("/delete_category")
@procedure(IdIn)
def category_delete(data: IdIn):
    product_dao.delete_category(data.id)
    return {"id": data.id}
