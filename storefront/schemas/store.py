# storefront/schemas/store.py
from __future__ import annotations

from datetime import date, datetime
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from storefront.core.business import DAYS_IN_WEEK, ClosureOverride
from storefront.services.store_config import parse_time

TIME_PATTERN = r"^\d{1,2}:\d{2}(:\d{2})?$"


class StoreStatusOut(BaseModel):
    is_open: bool
    accepting_orders: bool
    next_open_label: str
    reason: Optional[str] = None
    closed_by_override: bool = False
    order_cutoff: Optional[str] = None
    evaluated_at: datetime
    source: str


class ClosureIn(BaseModel):
    """Manual closure as the back-office submits it (the `storeClosure` record)."""
    isActive: bool
    startDate: Optional[date] = None
    endDate: Optional[date] = None
    reason: str = ""

    @field_validator("startDate", "endDate", mode="before")
    @classmethod
    def _blank_date(cls, v):
        return None if v == "" else v

    @model_validator(mode="after")
    def _check_range(self) -> "ClosureIn":
        if self.isActive:
            if self.startDate is None or self.endDate is None:
                raise ValueError("startDate and endDate are required when isActive is true")
            if self.startDate > self.endDate:
                raise ValueError("startDate must be on or before endDate")
        return self

    def to_override(self) -> ClosureOverride:
        return ClosureOverride(
            is_active=self.isActive,
            start_date=self.startDate,
            end_date=self.endDate,
            reason=self.reason,
        )


class ClosureOut(BaseModel):
    isActive: bool = False
    startDate: str = ""
    endDate: str = ""
    reason: str = ""


class OperatingHoursEntry(BaseModel):
    day_index: int = Field(..., ge=0, le=6)
    day_name: Optional[str] = None
    is_open: bool
    open_time: str = Field("00:00", pattern=TIME_PATTERN)
    close_time: str = Field("00:00", pattern=TIME_PATTERN)

    @model_validator(mode="after")
    def _open_before_close(self) -> "OperatingHoursEntry":
        if self.is_open:
            open_t, close_t = parse_time(self.open_time), parse_time(self.close_time)
            if open_t is None or close_t is None:
                raise ValueError("open_time and close_time must be valid HH:MM times")
            if open_t >= close_t:
                raise ValueError("open_time must be before close_time")
        return self


class ConfigUpdate(BaseModel):
    """Fields the backend accepts on PUT /config; anything else is dropped."""
    model_config = ConfigDict(extra="ignore")

    is_tutup: bool = False
    pesan: str = ""
    tgl_buka: str = ""
    limit_pesanan_harian: int = 20
    limit_jam_order: str = "15:00:00"
    latitude: str = ""
    longitude: str = ""
    operating_hours: Optional[List[OperatingHoursEntry]] = None

    @model_validator(mode="before")
    @classmethod
    def _nulls_to_defaults(cls, data: Any) -> Any:
        if isinstance(data, dict):
            return {k: v for k, v in data.items() if v is not None}
        return data

    @field_validator("operating_hours")
    @classmethod
    def _one_entry_per_day(cls, v):
        if v is None:
            return v
        days = [e.day_index for e in v]
        if len(days) != DAYS_IN_WEEK or len(set(days)) != DAYS_IN_WEEK:
            raise ValueError("operating_hours needs exactly one entry per weekday (0-6)")
        return sorted(v, key=lambda e: e.day_index)


class ClosureUpdateOut(BaseModel):
    closure: ClosureOut
    status: StoreStatusOut
