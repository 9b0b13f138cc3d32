# config/config_schemas.py
"""
Dispensing Configuration Schemas
Used by: /api/config

Design: In-memory configuration (no database persistence)
- GET /config → returns current settings
- POST /config → updates settings in-memory (partial updates supported)
- POST /config/reset → back to file/env defaults
- Settings reset to file defaults on application restart
"""
from typing import Optional

from pydantic import BaseModel, Field


class DispensingConfigRequest(BaseModel):
    """
    Request to update the robot dispatch configuration.
    All fields are optional, send only what you want to change.
    """

    # ── Robot Endpoint ──
    robot_host: Optional[str] = Field(None, min_length=1, description="Robot hostname or IP address")
    robot_port: Optional[int] = Field(None, ge=1, le=65535, description="Robot HTTP port")
    robot_command_path: Optional[str] = Field(
        None, min_length=1, description="Path of the dispense command endpoint", examples=["/command"]
    )

    # ── Dispatch Behaviour ──
    robot_timeout_seconds: Optional[float] = Field(
        None, gt=0.0, le=5.0, description="Per-command timeout in seconds (hard limit 5s)"
    )
    dispatch_enabled: Optional[bool] = Field(
        None, description="Turn robot dispatch on/off without restarting"
    )


class DispensingConfigResponse(BaseModel):
    """Current robot dispatch configuration (complete state)."""

    robot_host: str
    robot_port: int
    robot_command_path: str
    robot_url: str  # Computed
    robot_timeout_seconds: float
    dispatch_queue_size: int  # Read-only, applied at startup
    dispatch_enabled: bool

    class Config:
        json_schema_extra = {
            "example": {
                "robot_host": "10.100.0.48",
                "robot_port": 80,
                "robot_command_path": "/command",
                "robot_url": "http://10.100.0.48/command",
                "robot_timeout_seconds": 5.0,
                "dispatch_queue_size": 100,
                "dispatch_enabled": True,
            }
        }
