from pydantic import BaseModel, field_validator
from datetime import datetime
from typing import Literal

from store_traffic.utils.clock import as_utc


class TrafficEventOut(BaseModel):
    store_id: int
    customers_in: int
    customers_out: int
    time_stamp: datetime

    @field_validator("time_stamp")
    @classmethod
    def _attach_utc(cls, value: datetime) -> datetime:
        return as_utc(value)

    class Config:
        from_attributes = True


class HourlyTrafficOut(BaseModel):
    hour_label: str            # 12-hour clock, e.g. "03 PM"
    hour_start: datetime
    customers_in: int
    customers_out: int
    net_change: int


class RecentTrafficResponse(BaseModel):
    success: bool
    count: int
    data: list[TrafficEventOut]


class HourlyTrafficResponse(BaseModel):
    success: bool
    count: int
    data: list[HourlyTrafficOut]


class WelcomeMessage(BaseModel):
    type: Literal["welcome"] = "welcome"
    message: str
    timestamp: datetime


class TrafficFeedMessage(BaseModel):
    type: Literal["customer-traffic"] = "customer-traffic"
    data: TrafficEventOut
