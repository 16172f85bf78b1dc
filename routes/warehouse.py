from flask import Blueprint

from dao import warehouse as warehouse_dao
from schemas.common import IdIn
from schemas.master import PartyListIn, WarehouseIn, WarehouseOut, WarehouseUpdateIn
from utils.rpc import procedure

warehouse_bp = Blueprint("warehouse_api", __name__, url_prefix="/api/warehouse")


@warehouse_bp.post("/list")
@procedure(PartyListIn, WarehouseOut)
def warehouse_list(data: PartyListIn):
    return warehouse_dao.list_warehouses(**data.model_dump())


@warehouse_bp.post("/list_active")
@procedure(out=WarehouseOut)
def warehouse_list_active():
    return warehouse_dao.list_active_warehouses()


@warehouse_bp.post("/get_by_id")
@procedure(IdIn, WarehouseOut)
def warehouse_get(data: IdIn):
    return warehouse_dao.get_warehouse(data.id)


@warehouse_bp.post("/create")
@procedure(WarehouseIn, WarehouseOut)
def warehouse_create(data: WarehouseIn):
    return warehouse_dao.create_warehouse(**data.model_dump())


@warehouse_bp.post("/update")
@procedure(WarehouseUpdateIn, WarehouseOut)
def warehouse_update(data: WarehouseUpdateIn):
    return warehouse_dao.update_warehouse(data.id, **data.data.model_dump(exclude_unset=True))


@warehouse_bp.post("/delete")
@procedure(IdIn)
def warehouse_delete(data: IdIn):
    warehouse_dao.delete_warehouse(data.id)
    return {"id": data.id}
