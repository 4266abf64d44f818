"""Vendor and deliverer Pydantic schemas (request DTOs and response models)."""


from datetime import datetime

from foodies.schemas.common import CamelModel

class VendorOwner(CamelModel):
    id: str
    full_name: str | None = None
    email: str | None = None
    organization: str | None = None
    status: str

class VendorOut(CamelModel):
    id: str
    business_name: str
    business_address: str | None = None
    menu_summary: str | None = None
    is_active: bool
    created_at: datetime
    profile: VendorOwner | None = None

class ActiveToggle(CamelModel):
    is_active: bool

class VendorDeactivate(CamelModel):
    vendor_id: str

class DelivererOut(CamelModel):
    id: str
    full_name: str | None = None
    email: str | None = None
    vehicle_type: str
    availability: str
    is_active: bool
    total_deliveries: int
    active_deliveries: int

class DelivererStatusOut(CamelModel):
    id: str
    full_name: str | None = None
    email: str | None = None
    status: str

class VendorList(CamelModel):
    vendors: list[VendorOut]
