"""Stored document schemas.

Each model corresponds to a MongoDB collection. Repositories validate new
documents through these models before inserting them, so enum and shape
constraints hold for every write that creates a record.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, ClassVar, List, Literal, Optional

from bson import ObjectId
from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..persistence.documents import as_reference

RecordStatus = Literal["active", "inactive"]
UserRole = Literal["super_admin", "kam"]
DistributorChannel = Literal["pillbox", "other"]
OrderStatus = Literal["pending", "processing", "fulfilled", "cancelled"]
FinancialStatus = Literal["pending", "paid", "refunded"]
FulfillmentStatus = Literal["unfulfilled", "fulfilled", "partial"]
Priority = Literal["normal", "urgent", "emergency"]
Gender = Literal["male", "female", "other"]


class DocumentModel(BaseModel):
    """Base for stored documents; reference fields are kept as ObjectId."""

    model_config = ConfigDict(arbitrary_types_allowed=True, populate_by_name=True, extra="ignore")

    reference_fields: ClassVar[tuple[str, ...]] = ()

    def to_document(self) -> dict[str, Any]:
        data = self.model_dump(by_alias=True)
        for field in self.reference_fields:
            if field in data:
                data[field] = as_reference(data[field])
        return data


def _lower(value: Any) -> Any:
    return value.strip().lower() if isinstance(value, str) else value


def _upper(value: Any) -> Any:
    return value.strip().upper() if isinstance(value, str) else value


def _strip(value: Any) -> Any:
    return value.strip() if isinstance(value, str) else value


class UserDocument(DocumentModel):
    reference_fields: ClassVar[tuple[str, ...]] = ("district_id", "team_id")

    email: str
    password: str
    name: str
    role: UserRole
    district_id: Optional[Any] = None
    team_id: Optional[Any] = None
    status: RecordStatus = "active"

    _normalize_email = field_validator("email", mode="before")(_lower)
    _normalize_name = field_validator("name", mode="before")(_strip)


class DistrictCity(DocumentModel):
    """City embedded in a district."""

    reference_fields: ClassVar[tuple[str, ...]] = ("distributor_id",)

    id: Any = Field(default_factory=ObjectId, alias="_id")
    name: str
    distributor_channel: DistributorChannel
    distributor_id: Optional[Any] = None
    status: RecordStatus = "active"

    _normalize_name = field_validator("name", mode="before")(_strip)


class DistrictDocument(DocumentModel):
    reference_fields: ClassVar[tuple[str, ...]] = ("kam_id",)

    name: str
    code: str
    status: RecordStatus = "active"
    kam_id: Optional[Any] = None
    cities: List[DistrictCity] = Field(default_factory=list)

    _normalize_name = field_validator("name", mode="before")(_strip)
    _normalize_code = field_validator("code", mode="before")(_upper)

    def to_document(self) -> dict[str, Any]:
        data = super().to_document()
        data["cities"] = [city.to_document() for city in self.cities]
        return data


class CityDocument(DocumentModel):
    reference_fields: ClassVar[tuple[str, ...]] = ("distributor_id",)

    name: str
    distributor_channel: DistributorChannel
    distributor_id: Optional[Any] = None
    status: RecordStatus = "active"

    _normalize_name = field_validator("name", mode="before")(_strip)


class DistributorDocument(DocumentModel):
    reference_fields: ClassVar[tuple[str, ...]] = ("city_id",)

    email: str
    password: str
    name: str
    phone: str
    city_id: Optional[Any] = None
    role: Literal["distributor"] = "distributor"
    status: RecordStatus = "active"

    _normalize_email = field_validator("email", mode="before")(_lower)
    _normalize_text = field_validator("name", "phone", mode="before")(_strip)


class TeamDocument(DocumentModel):
    reference_fields: ClassVar[tuple[str, ...]] = ("district_id",)

    name: str
    description: str = ""
    district_id: Optional[Any] = None
    status: RecordStatus = "active"

    _normalize_text = field_validator("name", "description", mode="before")(_strip)


class TeamProductDocument(DocumentModel):
    reference_fields: ClassVar[tuple[str, ...]] = ("team_id", "product_id", "assigned_by")

    team_id: Any
    product_id: Any
    assigned_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    assigned_by: Optional[Any] = None
    status: RecordStatus = "active"


class DistrictProductDocument(DocumentModel):
    """Deprecated district/product assignment; kept so old records stay readable."""

    reference_fields: ClassVar[tuple[str, ...]] = ("district_id", "product_id", "assigned_by")

    district_id: Any
    product_id: Any
    assigned_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    assigned_by: Optional[Any] = None
    status: RecordStatus = "active"


class DoctorDocument(DocumentModel):
    reference_fields: ClassVar[tuple[str, ...]] = ("district_id", "kam_id", "team_id")

    email: str
    password: str
    name: str
    phone: str
    district_id: Any
    kam_id: Optional[Any] = None
    team_id: Optional[Any] = None
    pmdc_number: str
    specialty: str
    status: RecordStatus = "active"

    _normalize_email = field_validator("email", mode="before")(_lower)
    _normalize_name = field_validator("name", mode="before")(_strip)


class PatientDocument(DocumentModel):
    reference_fields: ClassVar[tuple[str, ...]] = ("created_by",)

    mrn: str
    name: str
    phone: str
    age: Optional[int] = None
    gender: Optional[Gender] = None
    address: Optional[str] = None
    city: Optional[str] = None
    created_by: Any


class SelectedProduct(DocumentModel):
    reference_fields: ClassVar[tuple[str, ...]] = ("product_id",)

    product_id: Optional[Any] = None
    name: Optional[str] = None
    sku: Optional[str] = None
    price: Optional[float] = None
    quantity: Optional[int] = None


class PrescriptionDocument(DocumentModel):
    reference_fields: ClassVar[tuple[str, ...]] = ("patient_id", "doctor_id", "district_id")

    mrn: str
    patient_id: Any
    doctor_id: Any
    district_id: Any
    prescription_text: str
    prescription_files: List[str] = Field(default_factory=list)
    duration_days: int
    priority: Priority = "normal"
    selected_product: Optional[SelectedProduct] = None
    diagnosis: Optional[str] = None
    notes: Optional[str] = None
    shopify_order_id: Optional[str] = None
    order_status: OrderStatus = "pending"

    def to_document(self) -> dict[str, Any]:
        data = super().to_document()
        if self.selected_product is not None:
            data["selected_product"] = self.selected_product.to_document()
        return data


class PatientInfo(DocumentModel):
    reference_fields: ClassVar[tuple[str, ...]] = ("city_id",)

    mrn: Optional[str] = None
    name: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    city_id: Optional[Any] = None
    city_name: Optional[str] = None


class DoctorInfo(DocumentModel):
    """Snapshot of the prescribing doctor at order time."""

    reference_fields: ClassVar[tuple[str, ...]] = ("doctor_id", "district_id")

    doctor_id: Optional[Any] = None
    name: Optional[str] = None
    district_id: Optional[Any] = None


class OrderDocument(DocumentModel):
    reference_fields: ClassVar[tuple[str, ...]] = ("prescription_id",)

    prescription_id: Any
    shopify_order_id: str
    shopify_order_number: str
    patient_info: PatientInfo = Field(default_factory=PatientInfo)
    doctor_info: DoctorInfo = Field(default_factory=DoctorInfo)
    order_status: OrderStatus = "pending"
    financial_status: FinancialStatus = "pending"
    fulfillment_status: FulfillmentStatus = "unfulfilled"
    tracking_number: Optional[str] = None
    tracking_url: Optional[str] = None
    total_amount: float
    currency: str = "PKR"
    shopify_created_at: Optional[datetime] = None
    shopify_updated_at: Optional[datetime] = None

    def to_document(self) -> dict[str, Any]:
        data = super().to_document()
        data["patient_info"] = self.patient_info.to_document()
        data["doctor_info"] = self.doctor_info.to_document()
        return data


class ProductDocument(DocumentModel):
    name: str
    sku: str
    description: Optional[str] = None
    price: float
    shopify_product_id: Optional[str] = None
    shopify_variant_id: Optional[str] = None
    status: RecordStatus = "active"

    _normalize_name = field_validator("name", "description", mode="before")(_strip)
    _normalize_sku = field_validator("sku", mode="before")(_upper)
