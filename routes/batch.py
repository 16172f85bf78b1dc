from flask import Blueprint
from flask_login import current_user

from dao import batch as batch_dao
from schemas.batch import (
    BatchIn,
    BatchListIn,
    BatchOut,
    BatchStatsOut,
    BatchUpdateIn,
    CostItemIn,
    CostItemUpdateIn,
    LandedCostItemOut,
)
from schemas.common import IdIn
from utils.rpc import procedure

batch_bp = Blueprint("batch_api", __name__, url_prefix="/api/batch")


@batch_bp.post("/list")
@procedure(BatchListIn, BatchOut)
def batch_list(data: BatchListIn):
    return batch_dao.list_batches(**data.model_dump())


@batch_bp.post("/get_by_id")
@procedure(IdIn, BatchOut)
def batch_get(data: IdIn):
    return batch_dao.get_batch(data.id)


@batch_bp.post("/create")
@procedure(BatchIn, BatchOut)
def batch_create(data: BatchIn):
    return batch_dao.create_batch(**data.model_dump())


@batch_bp.post("/update")
@procedure(BatchUpdateIn, BatchOut)
def batch_update(data: BatchUpdateIn):
    return batch_dao.update_batch(data.id, **data.data.model_dump(exclude_unset=True))


@batch_bp.post("/delete")
@procedure(IdIn)
def batch_delete(data: IdIn):
    batch_dao.delete_batch(data.id)
    return {"id": data.id}


@batch_bp.post("/confirm")
@procedure(IdIn, BatchOut)
def batch_confirm(data: IdIn):
    return batch_dao.confirm_batch(data.id, current_user.id)


@batch_bp.post("/cancel")
@procedure(IdIn, BatchOut)
def batch_cancel(data: IdIn):
    return batch_dao.cancel_batch(data.id)


# ---------------- landed costs ----------------
@batch_bp.post("/add_cost_item")
@procedure(CostItemIn, LandedCostItemOut)
def batch_add_cost_item(data: CostItemIn):
    return batch_dao.add_cost_item(**data.model_dump())


@batch_bp.post("/update_cost_item")
@procedure(CostItemUpdateIn, LandedCostItemOut)
def batch_update_cost_item(data: CostItemUpdateIn):
    return batch_dao.update_cost_item(data.id, **data.data.model_dump(exclude_unset=True))


@batch_bp.post("/remove_cost_item")
@procedure(IdIn, BatchOut)
def batch_remove_cost_item(data: IdIn):
    return batch_dao.remove_cost_item(data.id)


@batch_bp.post("/stats")
@procedure(out=BatchStatsOut)
def batch_stats():
    return batch_dao.stats()
