from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Database
    database_url: str = "sqlite+aiosqlite:///./data/journal.db"

    # App settings
    app_name: str = "Form Journal"
    debug: bool = False

    # Statistics windows (days) and dashboard size
    streak_window_days: int = 7
    trend_window_days: int = 30
    recent_limit: int = 10

    class Config:
        env_file = ".env"
        extra = "allow"


settings = Settings()
