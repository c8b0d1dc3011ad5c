import os
from pydantic import BaseModel
from typing import Optional


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in {"1", "true", "yes", "on"}


class Settings(BaseModel):
    """Environment-driven configuration.

    Defaults suit local development against DynamoDB Local.
    """
    temp_photos_dir: str = os.getenv("TEMP_PHOTOS_DIR", "./temp_photos")
    # Overrides temp_photos_dir as the root for user uploads when set
    upload_dir: Optional[str] = os.getenv("UPLOAD_DIR") or None
    image_max_width: int = int(os.getenv("IMAGE_MAX_WIDTH", "2000"))
    image_max_height: int = int(os.getenv("IMAGE_MAX_HEIGHT", "2000"))
    image_quality: int = int(os.getenv("IMAGE_QUALITY", "85"))

    enable_console_output: bool = _env_flag("ENABLE_CONSOLE_OUTPUT", "true")
    log_level: str = os.getenv("LOG_LEVEL", "INFO").upper()

    aws_access_key_id: str = os.getenv("AWS_ACCESS_KEY_ID", "test")
    aws_secret_access_key: str = os.getenv("AWS_SECRET_ACCESS_KEY", "test")
    aws_region: str = os.getenv("AWS_REGION", "us-east-1")
    aws_endpoint_url: Optional[str] = os.getenv("AWS_ENDPOINT_URL")
    table_name: str = os.getenv("TABLE_NAME", "memory_photos")
    auto_create_table: bool = _env_flag("AUTO_CREATE_TABLE", "false")

settings = Settings()
