from flask import Blueprint

from dao import supplier as supplier_dao
from schemas.common import IdIn
from schemas.master import PartyListIn, SupplierIn, SupplierOut, SupplierUpdateIn
from utils.rpc import procedure

supplier_bp = Blueprint("supplier_api", __name__, url_prefix="/api/supplier")


@supplier_bp.post("/list")
@procedure(PartyListIn, SupplierOut)
def suppliers_list(data: PartyListIn):
    return supplier_dao.list_suppliers(**data.model_dump())


@supplier_bp.post("/list_active")
@procedure(out=SupplierOut)
def suppliers_list_active():
    return supplier_dao.list_active_suppliers()


@supplier_bp.post("/get_by_id")
@procedure(IdIn, SupplierOut)
def suppliers_get(data: IdIn):
    return supplier_dao.get_supplier(data.id)


@supplier_bp.post("/create")
@procedure(SupplierIn, SupplierOut)
def suppliers_add(data: SupplierIn):
    return supplier_dao.create_supplier(**data.model_dump())


@supplier_bp.post("/update")
@procedure(SupplierUpdateIn, SupplierOut)
def suppliers_edit(data: SupplierUpdateIn):
    return supplier_dao.update_supplier(data.id, **data.data.model_dump(exclude_unset=True))


@supplier_bp.post("/delete")
@procedure(IdIn)
def suppliers_delete(data: IdIn):
    supplier_dao.delete_supplier(data.id)
    return {"id": data.id}
