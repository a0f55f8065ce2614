from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from fleetdesk.schemas.common import RequiredStr, ShortStr


class BankDetailsIn(BaseModel):
    bankName: ShortStr
    ifscCode: ShortStr
    accountNumber: ShortStr
    branchName: ShortStr


class BankDetailsPatch(BaseModel):
    bankName: Optional[ShortStr] = None
    ifscCode: Optional[ShortStr] = None
    accountNumber: Optional[ShortStr] = None
    branchName: Optional[ShortStr] = None


class SettingsCreate(BaseModel):
    """Company profile used on invoices."""
    companyName: ShortStr = Field(..., description="Registered company name")
    gstNumber: ShortStr = Field(..., description="GSTIN, stored uppercased")
    panNumber: ShortStr = Field(..., description="PAN, stored uppercased")
    proprietorName: ShortStr
    bankDetails: BankDetailsIn
    contactNumber: ShortStr
    companyAddress: RequiredStr


class SettingsUpdate(BaseModel):
    companyName: Optional[ShortStr] = None
    gstNumber: Optional[ShortStr] = None
    panNumber: Optional[ShortStr] = None
    proprietorName: Optional[ShortStr] = None
    bankDetails: Optional[BankDetailsPatch] = None
    contactNumber: Optional[ShortStr] = None
    companyAddress: Optional[RequiredStr] = None


class BankDetailsOut(BaseModel):
    bankName: str
    ifscCode: str
    accountNumber: str
    branchName: str

    model_config = {"from_attributes": True}


class SettingsOut(BaseModel):
    id: str
    userId: str
    companyName: str
    gstNumber: str
    panNumber: str
    proprietorName: str
    bankDetails: BankDetailsOut
    contactNumber: str
    companyAddress: str
    createdAt: Optional[datetime] = None
    updatedAt: Optional[datetime] = None

    model_config = {"from_attributes": True}
