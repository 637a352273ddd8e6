from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator
from pydantic.alias_generators import to_camel

AccountType = Literal["credit_card", "personal_loan", "home_loan", "auto_loan", "other"]
AccountStatus = Literal["active", "closed", "suspended", "written_off"]
AddressType = Literal["current", "previous", "permanent"]
ProcessingStatus = Literal["processing", "completed", "failed"]

PAN_REGEX = r"^[A-Z]{5}[0-9]{4}[A-Z]$"
LIST_VIEW_EXCLUDE = {"credit_accounts", "addresses"}


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_json_dict(self, **kwargs) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, **kwargs)


class CreditAccount(CamelModel):
    account_number: str = "N/A"
    account_type: AccountType = "other"
    bank_name: str = "Unknown Bank"
    current_balance: float = 0
    amount_overdue: float = 0
    credit_limit: Optional[float] = None
    account_status: AccountStatus = "active"
    opened_date: Optional[date] = None
    last_payment_date: Optional[date] = None
    emi_amount: Optional[float] = None


class Address(CamelModel):
    type: AddressType = "current"
    address: str = "N/A"
    city: str = ""
    state: str = ""
    pincode: str = ""
    country: str = "India"


class ReportSummary(CamelModel):
    total_accounts: int = 0
    active_accounts: int = 0
    closed_accounts: int = 0
    current_balance_amount: float = 0
    secured_accounts_amount: float = 0
    unsecured_accounts_amount: float = 0
    last_7_days_credit_enquiries: int = Field(0, alias="last7DaysCreditEnquiries")


class CreditReportRecord(CamelModel):
    id: Optional[str] = None
    name: str = Field(min_length=1)
    mobile_phone: str = Field(min_length=1)
    pan: str = Field(pattern=PAN_REGEX)
    credit_score: int = Field(ge=300, le=900)
    report_summary: ReportSummary = Field(default_factory=ReportSummary)
    credit_accounts: List[CreditAccount] = Field(default_factory=list)
    addresses: List[Address] = Field(default_factory=list)

    report_date: datetime = Field(default_factory=_utcnow)
    xml_file_name: str = ""
    processing_status: ProcessingStatus = "processing"
    error_message: Optional[str] = None
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)

    @field_validator("name", "mobile_phone", mode="before")
    @classmethod
    def _strip(cls, value):
        return value.strip() if isinstance(value, str) else value

    @field_validator("pan", mode="before")
    @classmethod
    def _upper_pan(cls, value):
        return value.strip().upper() if isinstance(value, str) else value

    @computed_field(alias="totalBalance")
    @property
    def total_balance(self) -> float:
        return sum(account.current_balance or 0 for account in self.credit_accounts)

    @computed_field(alias="totalOverdue")
    @property
    def total_overdue(self) -> float:
        return sum(account.amount_overdue or 0 for account in self.credit_accounts)

    def active_accounts(self) -> List[CreditAccount]:
        return [a for a in self.credit_accounts if a.account_status == "active"]

    def closed_accounts(self) -> List[CreditAccount]:
        return [a for a in self.credit_accounts if a.account_status == "closed"]
