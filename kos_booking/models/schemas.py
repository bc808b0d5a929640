"""
Pydantic schemas
Request validation and response shapes for the API boundary
"""
import re
from datetime import datetime, date
from decimal import Decimal
from typing import Annotated, List, Optional
from pydantic import BaseModel, BeforeValidator, Field, field_validator, model_validator, ConfigDict
from kos_booking.models.entities import BookingStatus, KosGender

_ISO_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")

# last year whose month/year windows stay inside the date range
MAX_QUERY_YEAR = date.max.year - 1


def validation_message(exc) -> str:
    """Flatten pydantic errors into one caller-facing message"""
    messages = []
    for err in exc.errors():
        msg = err.get("msg", "")
        if msg.startswith("Value error, "):
            msg = msg[len("Value error, "):]
        loc = ".".join(str(part) for part in err.get("loc", ()) if part != "body")
        messages.append(f"{loc}: {msg}" if loc else msg)
    return ", ".join(messages)


def _iso_date(v):
    """Accept date objects and YYYY-MM-DD strings only (no timestamps)"""
    if isinstance(v, date) and not isinstance(v, datetime):
        return v
    if isinstance(v, str) and _ISO_DATE.match(v):
        return v
    raise ValueError("must be a date in YYYY-MM-DD format")


IsoDate = Annotated[date, BeforeValidator(_iso_date)]


def _clean_text(v: Optional[str], field_name: str) -> Optional[str]:
    if v is None:
        return v
    v = v.strip()
    if not v:
        if field_name == "description":
            return None
        raise ValueError("must not be blank")
    return v


# ============== User Schemas ==============

class UserSummary(BaseModel):
    name: str
    email: str
    model_config = ConfigDict(from_attributes=True)


# ============== Kos Schemas ==============

class KosBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=150)
    address: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    price_per_month: Decimal = Field(..., gt=0)
    gender: KosGender = KosGender.ALL

    @field_validator("name", "address", "description")
    @classmethod
    def strip_text(cls, v, info):
        return _clean_text(v, info.field_name)


class KosCreate(KosBase):
    pass


class KosUpdate(BaseModel):
    """Partial listing edit; omitted fields stay as they are"""
    name: Optional[str] = Field(None, min_length=1, max_length=150)
    address: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    price_per_month: Optional[Decimal] = Field(None, gt=0)
    gender: Optional[KosGender] = None

    @field_validator("name", "address", "description")
    @classmethod
    def strip_text(cls, v, info):
        return _clean_text(v, info.field_name)


class KosListQuery(BaseModel):
    """Filters of the public kos listing"""
    search: Optional[str] = None
    address: Optional[str] = None
    min_price: Optional[Decimal] = Field(None, ge=0)
    max_price: Optional[Decimal] = Field(None, ge=0)
    gender: Optional[List[KosGender]] = None

    @field_validator("search", "address")
    @classmethod
    def blank_is_none(cls, v):
        if v is None:
            return v
        return v.strip() or None

    @field_validator("gender", mode="before")
    @classmethod
    def split_genders(cls, v):
        # comma list; unknown entries are dropped, but at least one must be valid
        if v is None:
            return v
        if isinstance(v, str):
            if not v.strip():
                return None
            v = v.split(",")
        valid = {g.value for g in KosGender}
        picked = [str(g).strip().upper() for g in v if str(g).strip().upper() in valid]
        if not picked:
            raise ValueError("Invalid gender value")
        return picked

    @model_validator(mode="after")
    def check_price_range(self):
        if self.min_price is not None and self.max_price is not None and self.min_price > self.max_price:
            raise ValueError("Minimum price must not exceed maximum price")
        return self


class KosResponse(KosBase):
    id: int
    uuid: str
    owner_id: int
    created_at: datetime
    model_config = ConfigDict(from_attributes=True)


class KosSummary(BaseModel):
    name: str
    address: str
    model_config = ConfigDict(from_attributes=True)


class KosDetail(KosSummary):
    price_per_month: Decimal
    owner: UserSummary


# ============== Booking Schemas ==============

class BookingCreate(BaseModel):
    kos_id: int = Field(..., gt=0)
    start_date: IsoDate
    end_date: IsoDate

    @model_validator(mode="after")
    def end_after_start(self):
        if self.end_date <= self.start_date:
            raise ValueError("End date must be after start date")
        return self


class BookingUpdate(BaseModel):
    start_date: Optional[IsoDate] = None
    end_date: Optional[IsoDate] = None
    status: Optional[BookingStatus] = None
    # optimistic-concurrency check against the stored version
    version: Optional[int] = Field(None, ge=1)

    @model_validator(mode="after")
    def check_fields(self):
        if self.start_date is None and self.end_date is None and self.status is None:
            raise ValueError("At least one of start_date, end_date or status is required")
        if self.start_date and self.end_date and self.end_date <= self.start_date:
            raise ValueError("End date must be after start date")
        return self


class BookingHistoryQuery(BaseModel):
    """Time filter for booking history; at least one combination is required"""
    month: Optional[int] = Field(None, ge=1, le=12)
    year: Optional[int] = Field(None, gt=0, le=MAX_QUERY_YEAR)
    start_date: Optional[IsoDate] = None
    end_date: Optional[IsoDate] = None

    @model_validator(mode="after")
    def check_filter(self):
        if self.month is None and self.start_date is None and self.year is None:
            raise ValueError("One of month, start_date or year is required")
        if self.start_date and self.end_date and self.end_date <= self.start_date:
            raise ValueError("End date must be after start date")
        return self


class BookingResponse(BaseModel):
    id: int
    uuid: str
    kos_id: int
    user_id: int
    start_date: date
    end_date: date
    status: BookingStatus
    version: int
    created_at: datetime
    updated_at: Optional[datetime] = None
    model_config = ConfigDict(from_attributes=True)


class BookingListItem(BookingResponse):
    """History row with kos and tenant projections"""
    kos: KosSummary
    user: UserSummary


class BookingDetailResponse(BookingResponse):
    kos: KosDetail
    user: UserSummary
