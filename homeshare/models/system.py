"""Server information models."""

from pydantic import BaseModel, Field


class LimitsInfo(BaseModel):
    max_file_size: int
    max_files: int


class ServerInfo(BaseModel):
    server_ip: str = "localhost"
    port: int = 0
    server_url: str = ""
    config: LimitsInfo = Field(default_factory=lambda: LimitsInfo(max_file_size=0, max_files=0))
