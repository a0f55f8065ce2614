from datetime import datetime
from typing import Annotated, Any, List, Optional

from pydantic import BaseModel, Field, StringConstraints, field_validator

from fleetdesk.schemas.common import OptionalStr, RequiredStr, ShortStr, to_naive_utc

Quantity = Annotated[float, Field(gt=0, lt=1_000_000, allow_inf_nan=False)]
Rate = Annotated[float, Field(gt=0, lt=1_000_000_000, allow_inf_nan=False)]
# Zero is let through so the estimate can answer "Valid rate is required"
EstimateRate = Annotated[float, Field(ge=0, lt=1_000_000_000, allow_inf_nan=False)]
RecipientAddress = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=500)]
WorkingTime = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=50)]


class BillingItemIn(BaseModel):
    """A single invoice line as submitted by the client."""
    description: RequiredStr = Field(..., description="What is being billed")
    hsnSac: RequiredStr = Field(..., description="HSN/SAC tax classification code, e.g. '996601'")
    unit: RequiredStr = Field(..., description="Billing unit, e.g. 'Hours', 'Trip', 'Km'")
    quantity: Quantity
    rate: Rate


class BillingItemPatch(BaseModel):
    """A line item in an update; missing quantity/rate are filled by the calculator."""
    description: Optional[RequiredStr] = None
    hsnSac: Optional[RequiredStr] = None
    unit: Optional[RequiredStr] = None
    quantity: Optional[Quantity] = None
    rate: Optional[Rate] = None


class InvoiceBankDetailsIn(BaseModel):
    bankName: ShortStr
    branch: ShortStr
    accountNumber: ShortStr
    ifscCode: ShortStr


class InvoiceBankDetailsPatch(BaseModel):
    bankName: Optional[ShortStr] = None
    branch: Optional[ShortStr] = None
    accountNumber: Optional[ShortStr] = None
    ifscCode: Optional[ShortStr] = None


class BillingCreate(BaseModel):
    """
    Schema for creating an invoice.

    Fields are declared in validation order: top-level fields first, then the
    line items, then the bank details. Vehicle ownership is checked afterwards
    against the store. ``totalInvoiceValue`` is not accepted; it is computed.
    """
    companyName: ShortStr = Field(..., description="Billing company name")
    vehicleIds: List[str] = Field(..., min_length=1, description="Vehicles covered by this invoice")
    billingDate: Optional[datetime] = Field(None, description="Defaults to now")
    recipientName: ShortStr
    recipientAddress: RecipientAddress
    workingTime: WorkingTime
    period: OptionalStr = ""
    projectLocation: OptionalStr = ""
    placeOfSupply: OptionalStr = ""
    isCompleted: bool = True
    gstEnabled: bool = True
    billingItems: List[BillingItemIn] = Field(..., min_length=1)
    bankDetails: InvoiceBankDetailsIn

    @field_validator("billingDate", mode="before")
    @classmethod
    def normalise_date(cls, v: Any) -> Any:
        return to_naive_utc(v)


class BillingUpdate(BaseModel):
    companyName: Optional[ShortStr] = None
    vehicleIds: Optional[List[str]] = Field(None, min_length=1)
    billingDate: Optional[datetime] = None
    recipientName: Optional[ShortStr] = None
    recipientAddress: Optional[RecipientAddress] = None
    workingTime: Optional[WorkingTime] = None
    period: Optional[OptionalStr] = None
    projectLocation: Optional[OptionalStr] = None
    placeOfSupply: Optional[OptionalStr] = None
    isCompleted: Optional[bool] = None
    gstEnabled: Optional[bool] = None
    billingItems: Optional[List[BillingItemPatch]] = Field(None, min_length=1)
    bankDetails: Optional[InvoiceBankDetailsPatch] = None

    @field_validator("billingDate", mode="before")
    @classmethod
    def normalise_date(cls, v: Any) -> Any:
        return to_naive_utc(v)


class BillingCalculateRequest(BaseModel):
    """Either a single quantity/rate pair or a full list of line items."""
    quantity: Quantity = 1
    rate: Optional[EstimateRate] = None
    billingItems: Optional[List[BillingItemIn]] = None


class BillingItemOut(BaseModel):
    description: str
    hsnSac: str
    unit: str
    quantity: float
    rate: float
    totalAmount: float

    model_config = {"from_attributes": True}


class InvoiceBankDetailsOut(BaseModel):
    bankName: str
    branch: str
    accountNumber: str
    ifscCode: str

    model_config = {"from_attributes": True}


class VehicleRefOut(BaseModel):
    id: str
    vehicleNumber: str


class BillingOut(BaseModel):
    id: str
    userId: str
    companyName: str
    vehicleIds: List[str]
    vehicles: List[VehicleRefOut] = []
    billingDate: datetime
    recipientName: str
    recipientAddress: str
    workingTime: str
    period: str
    projectLocation: str
    placeOfSupply: str
    billingItems: List[BillingItemOut]
    bankDetails: InvoiceBankDetailsOut
    totalInvoiceValue: float
    isCompleted: bool
    gstEnabled: bool
    createdAt: Optional[datetime] = None
    updatedAt: Optional[datetime] = None

    model_config = {"from_attributes": True}


class BillingCalculation(BaseModel):
    """Single-line estimate, with the 18% GST breakdown alongside the line total."""
    quantity: float
    rate: float
    totalAmount: float
    subtotal: float
    taxRate: float
    taxAmount: float
    total: float


class InvoiceEstimate(BaseModel):
    billingItems: List[BillingItemOut]
    totalInvoiceValue: float


class BillingStats(BaseModel):
    totalBills: int
    totalRevenue: float
    monthlyBills: int
    monthlyRevenue: float
    recentBills: List[BillingOut]
