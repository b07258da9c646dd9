from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field


class MessageRow(BaseModel):
    id: int
    topic: Optional[str] = None
    value: Optional[str] = None
    timestamp: Optional[str] = None


class EarthquakeRow(BaseModel):
    id: int
    node_id: Optional[str] = None
    magnitude: Optional[str] = None
    location: Optional[str] = None
    timestamp: Optional[str] = None


class BatteryRow(BaseModel):
    id: int
    node_id: Optional[str] = None
    voltage: Optional[str] = None
    raw_message: Optional[str] = None
    timestamp: Optional[str] = None


class ClearResult(BaseModel):
    message: str = "All history deleted"


class LivenessOut(BaseModel):
    transport_status: str
    critical_node_status: str


class ServiceHealth(BaseModel):
    healthy: bool
    running: bool
    transport_connected: bool
    stores: dict = Field(default_factory=dict)
