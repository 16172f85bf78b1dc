from flask import Blueprint

from dao import cost_item_type as cit_dao
from db.models.user import UserRole
from schemas.common import IdIn
from schemas.master import (
    CostItemTypeIn,
    CostItemTypeListIn,
    CostItemTypeOut,
    CostItemTypeUpdateIn,
    SeedResultOut,
)
from utils.auth import roles_required
from utils.rpc import procedure

cost_item_type_bp = Blueprint("cost_item_type_api", __name__, url_prefix="/api/cost_item_type")


@cost_item_type_bp.post("/list")
@procedure(CostItemTypeListIn, CostItemTypeOut)
def cit_list(data: CostItemTypeListIn):
    return cit_dao.list_cost_item_types(**data.model_dump())


@cost_item_type_bp.post("/list_active")
@procedure(out=CostItemTypeOut)
def cit_list_active():
    return cit_dao.list_active_cost_item_types()


@cost_item_type_bp.post("/get_by_id")
@procedure(IdIn, CostItemTypeOut)
def cit_get(data: IdIn):
    return cit_dao.get_cost_item_type(data.id)


@cost_item_type_bp.post("/create")
@procedure(CostItemTypeIn, CostItemTypeOut)
def cit_create(data: CostItemTypeIn):
    return cit_dao.create_cost_item_type(**data.model_dump())


@cost_item_type_bp.post("/update")
@procedure(CostItemTypeUpdateIn, CostItemTypeOut)
def cit_update(data: CostItemTypeUpdateIn):
    return cit_dao.update_cost_item_type(data.id, **data.data.model_dump(exclude_unset=True))


@cost_item_type_bp.post("/delete")
@procedure(IdIn)
def cit_delete(data: IdIn):
    cit_dao.delete_cost_item_type(data.id)
    return {"id": data.id}


@cost_item_type_bp.post("/seed_defaults")
@procedure(out=SeedResultOut)
@roles_required(UserRole.ADMIN)
def cit_seed_defaults():
    return cit_dao.seed_defaults()
