from flask import Blueprint

from dao import customer as customer_dao
from schemas.common import IdIn
from schemas.master import CustomerIn, CustomerOut, CustomerUpdateIn, PartyListIn
from utils.rpc import procedure

customer_bp = Blueprint("customer_api", __name__, url_prefix="/api/customer")


@customer_bp.post("/list")
@procedure(PartyListIn, CustomerOut)
def customer_list(data: PartyListIn):
    return customer_dao.list_customers(**data.model_dump())


@customer_bp.post("/list_active")
@procedure(out=CustomerOut)
def customer_list_active():
    return customer_dao.list_active_customers()


@customer_bp.post("/get_by_id")
@procedure(IdIn, CustomerOut)
def customer_get(data: IdIn):
    return customer_dao.get_customer(data.id)


@customer_bp.post("/create")
@procedure(CustomerIn, CustomerOut)
def customer_create(data: CustomerIn):
    return customer_dao.create_customer(**data.model_dump())


@customer_bp.post("/update")
@procedure(CustomerUpdateIn, CustomerOut)
def customer_update(data: CustomerUpdateIn):
    return customer_dao.update_customer(data.id, **data.data.model_dump(exclude_unset=True))


@customer_bp.post("/delete")
@procedure(IdIn)
def customer_delete(data: IdIn):
    customer_dao.delete_customer(data.id)
    return {"id": data.id}


@customer_bp.post("/toggle_active")
@procedure(IdIn, CustomerOut)
def customer_toggle_active(data: IdIn):
    return customer_dao.toggle_customer_active(data.id)
