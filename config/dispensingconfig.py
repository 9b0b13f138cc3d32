# config/dispensingconfig.py
"""
Dispensing Robot Configuration
Where the robotic dispensing unit lives and how long we wait for it
"""
from pydantic import Field
from pydantic_settings import BaseSettings


class DispensingSettings(BaseSettings):
    """Configuration for the robot dispatch channel"""

    # ========================================================================
    # ROBOT ENDPOINT
    # ========================================================================
    # The robot accepts POST {ward, bed, tag} on a single path.
    ROBOT_HOST: str = "10.100.0.48"
    ROBOT_PORT: int = 80
    ROBOT_COMMAND_PATH: str = "/command"
    ROBOT_API_KEY: str = ""

    # ========================================================================
    # DISPATCH BEHAVIOUR
    # ========================================================================
    # Hard limit for one dispense command. Expiry counts as a failed dispatch.
    ROBOT_TIMEOUT_SECONDS: float = Field(5.0, gt=0.0, le=5.0)

    # Commands waiting for the robot worker. A full queue drops the command.
    DISPATCH_QUEUE_SIZE: int = 100

    # Disable to run the backend without any robot on the network
    DISPATCH_ENABLED: bool = True

    class Config:
        env_file = ".env"
        extra = "ignore"

    # ========================================================================
    # COMPUTED PROPERTIES
    # ========================================================================
    @property
    def robot_url(self) -> str:
        """Full URL of the robot command endpoint."""
        path = self.ROBOT_COMMAND_PATH
        if not path.startswith("/"):
            path = f"/{path}"
        if self.ROBOT_PORT == 80:
            return f"http://{self.ROBOT_HOST}{path}"
        return f"http://{self.ROBOT_HOST}:{self.ROBOT_PORT}{path}"


dispensing_settings = DispensingSettings()
