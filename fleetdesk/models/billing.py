"""
Persisted shape of the billings collection.

An invoice holds one or more line items and references one or more of the
owner's vehicles. ``totalInvoiceValue`` is always the rounded sum of the item
totals and is written only by the billing calculator.
"""

from datetime import datetime
from typing import List

from pydantic import BaseModel

from fleetdesk.models.base import Record


class BillingItem(BaseModel):
    description: str
    hsnSac: str
    unit: str
    quantity: float
    rate: float
    totalAmount: float


class InvoiceBankDetails(BaseModel):
    bankName: str
    branch: str
    accountNumber: str
    ifscCode: str


class VehicleRef(BaseModel):
    id: str
    vehicleNumber: str


class Billing(Record):
    userId: str
    companyName: str
    vehicleIds: List[str]
    billingDate: datetime
    recipientName: str
    recipientAddress: str
    workingTime: str
    period: str = ""
    projectLocation: str = ""
    placeOfSupply: str = ""
    billingItems: List[BillingItem]
    bankDetails: InvoiceBankDetails
    totalInvoiceValue: float
    isCompleted: bool = True
    gstEnabled: bool = True


class BillingDetail(Billing):
    """An invoice together with the numbers of the vehicles it references."""
    vehicles: List[VehicleRef] = []
