from pydantic_settings import BaseSettings


class Config(BaseSettings):
    """Application configuration loaded from environment variables."""

    database_url: str
    host: str = "127.0.0.1"
    port: int = 3100
    debug: bool = False
    cors_origins: list[str] = []
    uploads_path: str  # Directory path for storing uploaded document files
    upload_max_size: int = 20 * 1024 * 1024
    upload_allowed_extensions: list[str] = ["pdf", "doc", "docx", "xls", "xlsx", "ppt", "pptx", "jpg", "jpeg", "png"]
    admin_password: str = "admin"  # Password for the default admin user, applied only when it is first created
    allocation_max_attempts: int = 100  # Sequence values tried before an automatic allocation gives up
    # Build metadata injected during Docker build via environment variables
    git_commit_hash: str = "unknown"
    git_commit_date: str = "unknown"
    build_time: str = "unknown"

    model_config = {
        "env_file": [".env"],
        "env_prefix": "ALSADER_",
        "extra": "ignore",
    }
