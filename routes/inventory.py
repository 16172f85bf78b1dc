from flask import Blueprint

from dao import inventory as inv_dao
from dao import settings as settings_dao
from db.models.user import UserRole
from schemas.inventory import (
    AvailabilityIn,
    AvailabilityOut,
    InventoryListIn,
    InventoryOut,
    InventoryStatsOut,
    PreviewIn,
    PreviewOut,
    ProductStockOut,
    SettingIn,
    SettingOut,
    SummaryListIn,
    WarehouseStockIn,
    WarehouseStockOut,
)
from schemas.master import SeedResultOut
from utils.auth import roles_required
from utils.rpc import procedure

inventory_bp = Blueprint("inventory_api", __name__, url_prefix="/api/inventory")


@inventory_bp.post("/list")
@procedure(InventoryListIn, InventoryOut)
def inventory_list(data: InventoryListIn):
    return inv_dao.list_inventory(**data.model_dump())


@inventory_bp.post("/summary_by_product")
@procedure(SummaryListIn, ProductStockOut)
def inventory_summary(data: SummaryListIn):
    return inv_dao.summary_by_product(**data.model_dump())


@inventory_bp.post("/by_warehouse")
@procedure(WarehouseStockIn, WarehouseStockOut)
def inventory_by_warehouse(data: WarehouseStockIn):
    return inv_dao.by_warehouse(data.warehouse_id)


@inventory_bp.post("/check_availability")
@procedure(AvailabilityIn, AvailabilityOut)
def inventory_check(data: AvailabilityIn):
    return inv_dao.check_availability(data.product_id, data.quantity, data.warehouse_id)


@inventory_bp.post("/preview_allocation")
@procedure(PreviewIn, PreviewOut)
def inventory_preview(data: PreviewIn):
    picks = [(p.batch_id, p.quantity) for p in data.picks] if data.picks else None
    return inv_dao.preview_allocation(
        data.product_id, data.quantity, data.method, data.warehouse_id, picks
    )


@inventory_bp.post("/stats")
@procedure(out=InventoryStatsOut)
def inventory_stats():
    return inv_dao.stats()


# ---------------- system settings ----------------
@inventory_bp.post("/get_settings")
@procedure(out=SettingOut)
def settings_list():
    return settings_dao.list_settings()


@inventory_bp.post("/update_setting")
@procedure(SettingIn, SettingOut)
@roles_required(UserRole.ADMIN)
def settings_update(data: SettingIn):
    return settings_dao.update_setting(data.key, data.value, data.description)


@inventory_bp.post("/seed_settings")
@procedure(out=SeedResultOut)
@roles_required(UserRole.ADMIN)
def settings_seed():
    return settings_dao.seed_settings()
