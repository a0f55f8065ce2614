from pydantic import BaseModel

from fleetdesk.models.base import Record


class BankDetails(BaseModel):
    bankName: str
    ifscCode: str
    accountNumber: str
    branchName: str


class CompanySettings(Record):
    """Business profile printed on invoices; at most one per user."""
    userId: str
    companyName: str
    gstNumber: str
    panNumber: str
    proprietorName: str
    bankDetails: BankDetails
    contactNumber: str
    companyAddress: str
