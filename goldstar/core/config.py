from pydantic_settings import BaseSettings
from pydantic import Field

class Settings(BaseSettings):
    PROJECT_NAME: str = "Gold Star Bond Cleaning API"
    PORT: int = 3000
    DATABASE_URL: str = "sqlite:///./goldstar.db"
    LOG_LEVEL: str = "INFO"

    # SMTP (mapped from the same .env the website deployment uses)
    MAIL_SERVER: str = Field("localhost", validation_alias="SMTP_HOST")
    MAIL_PORT: int = Field(465, validation_alias="SMTP_PORT")
    MAIL_USERNAME: str = Field("", validation_alias="SMTP_USER")
    MAIL_PASSWORD: str = Field("", validation_alias="SMTP_PASS")
    MAIL_SSL: bool = True
    MAIL_TIMEOUT: float = 10.0
    MAIL_SENDER_NAME: str = "Gold Star Bond Cleaning"
    RECIPIENT_EMAIL: str = ""
    SMTP_VERIFY_ON_STARTUP: bool = True

    # Uploads
    UPLOAD_DIR: str = "public/uploads"
    IMAGE_MAX_WIDTH: int = 800
    IMAGE_QUALITY: int = 80

    @property
    def BLOG_UPLOAD_DIR(self) -> str:
        return f"{self.UPLOAD_DIR.rstrip('/')}/blog"

    class Config:
        env_file = ".env"
        extra = "ignore"
        populate_by_name = True


def get_settings() -> Settings:
    return Settings()
