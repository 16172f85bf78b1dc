from flask import Blueprint
from flask_login import current_user

from dao import purchase as po_dao
from schemas.common import IdIn
from schemas.orders import (
    OrderStatsOut,
    POCreate,
    POListIn,
    POOut,
    POUpdateIn,
    ReceiveIn,
    ReceiveOut,
)
from utils.rpc import procedure

purchase_bp = Blueprint("purchase_order_api", __name__, url_prefix="/api/purchase_order")


@purchase_bp.post("/list")
@procedure(POListIn, POOut)
def po_list(data: POListIn):
    return po_dao.list_purchases(**data.model_dump())


@purchase_bp.post("/get_by_id")
@procedure(IdIn, POOut)
def po_get(data: IdIn):
    return po_dao.get_po(data.id)


@purchase_bp.post("/create")
@procedure(POCreate, POOut)
def po_create(data: POCreate):
    return po_dao.create_po(user_id=current_user.id, **data.model_dump())


@purchase_bp.post("/update")
@procedure(POUpdateIn, POOut)
def po_update(data: POUpdateIn):
    return po_dao.update_po(data.id, **data.data.model_dump(exclude_unset=True))


@purchase_bp.post("/confirm")
@procedure(IdIn, POOut)
def po_confirm(data: IdIn):
    return po_dao.confirm_po(data.id, current_user.id)


@purchase_bp.post("/receive")
@procedure(ReceiveIn, ReceiveOut)
def po_receive(data: ReceiveIn):
    return po_dao.receive_po(
        data.id,
        [line.model_dump() for line in data.items],
        user_id=current_user.id,
        notes=data.notes,
        received_date=data.received_date,
    )


@purchase_bp.post("/cancel")
@procedure(IdIn, POOut)
def po_cancel(data: IdIn):
    return po_dao.cancel_po(data.id)


@purchase_bp.post("/delete")
@procedure(IdIn)
def po_delete(data: IdIn):
    po_dao.delete_po(data.id)
    return {"id": data.id}


@purchase_bp.post("/stats")
@procedure(out=OrderStatsOut)
def po_stats():
    return po_dao.stats()
