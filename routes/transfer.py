from flask import Blueprint
from flask_login import current_user

from dao import transfer as transfer_dao
from schemas.common import IdIn
from schemas.inventory import TransferCreate, TransferListIn, TransferOut
from utils.rpc import procedure

transfer_bp = Blueprint("transfer_api", __name__, url_prefix="/api/transfer")


@transfer_bp.post("/list")
@procedure(TransferListIn, TransferOut)
def transfer_list(data: TransferListIn):
    return transfer_dao.list_transfers(**data.model_dump())


@transfer_bp.post("/get_by_id")
@procedure(IdIn, TransferOut)
def transfer_get(data: IdIn):
    return transfer_dao.get_transfer(data.id)


@transfer_bp.post("/create")
@procedure(TransferCreate, TransferOut)
def transfer_create(data: TransferCreate):
    payload = data.model_dump()
    return transfer_dao.create_transfer(user_id=current_user.id, **payload)


@transfer_bp.post("/submit")
@procedure(IdIn, TransferOut)
def transfer_submit(data: IdIn):
    return transfer_dao.submit_transfer(data.id)


@transfer_bp.post("/approve")
@procedure(IdIn, TransferOut)
def transfer_approve(data: IdIn):
    return transfer_dao.approve_transfer(data.id, current_user.id)


@transfer_bp.post("/complete")
@procedure(IdIn, TransferOut)
def transfer_complete(data: IdIn):
    return transfer_dao.complete_transfer(data.id, current_user.id)


@transfer_bp.post("/cancel")
@procedure(IdIn, TransferOut)
def transfer_cancel(data: IdIn):
    return transfer_dao.cancel_transfer(data.id)


@transfer_bp.post("/delete")
@procedure(IdIn)
def transfer_delete(data: IdIn):
    transfer_dao.delete_transfer(data.id)
    return {"id": data.id}
