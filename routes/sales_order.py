from flask import Blueprint
from flask_login import current_user

from dao import sales as so_dao
from schemas.common import IdIn
from schemas.orders import OrderStatsOut, ShipIn, SOCreate, SOListIn, SOOut, SOUpdateIn
from utils.rpc import procedure

sales_bp = Blueprint("sales_order_api", __name__, url_prefix="/api/sales_order")


@sales_bp.post("/list")
@procedure(SOListIn, SOOut)
def so_list(data: SOListIn):
    return so_dao.list_sales(**data.model_dump())


@sales_bp.post("/get_by_id")
@procedure(IdIn, SOOut)
def so_get(data: IdIn):
    return so_dao.get_so(data.id)


@sales_bp.post("/create")
@procedure(SOCreate, SOOut)
def so_create(data: SOCreate):
    return so_dao.create_so(user_id=current_user.id, **data.model_dump())


@sales_bp.post("/update")
@procedure(SOUpdateIn, SOOut)
def so_update(data: SOUpdateIn):
    return so_dao.update_so(data.id, **data.data.model_dump(exclude_unset=True))


@sales_bp.post("/confirm")
@procedure(IdIn, SOOut)
def so_confirm(data: IdIn):
    return so_dao.confirm_so(data.id, current_user.id)


@sales_bp.post("/ship")
@procedure(ShipIn, SOOut)
def so_ship(data: ShipIn):
    lines = [line.model_dump() for line in data.items] if data.items else None
    return so_dao.ship_so(
        data.id,
        lines,
        user_id=current_user.id,
        tracking_number=data.tracking_number,
        notes=data.notes,
    )


@sales_bp.post("/cancel")
@procedure(IdIn, SOOut)
def so_cancel(data: IdIn):
    return so_dao.cancel_so(data.id)


@sales_bp.post("/complete")
@procedure(IdIn, SOOut)
def so_complete(data: IdIn):
    return so_dao.complete_so(data.id)


@sales_bp.post("/delete")
@procedure(IdIn)
def so_delete(data: IdIn):
    so_dao.delete_so(data.id)
    return {"id": data.id}


@sales_bp.post("/stats")
@procedure(out=OrderStatsOut)
def so_stats():
    return so_dao.stats()
