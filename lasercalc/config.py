from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    DATABASE_URL: str = "sqlite:///./lasercalc.db"
    APP_NAME: str = "Laser Cutting Calculators"
    COMPANY_NAME: str = "Laser Cutting Calculators"
    LOG_LEVEL: str = "INFO"

    # Stamped into exports
    CALCULATOR_VERSION: str = "1.0.0"

    # Share links and embed snippets
    PUBLIC_BASE_URL: str = "http://localhost:8000"
    EMBED_DEFAULT_WIDTH: int = 800
    EMBED_DEFAULT_HEIGHT: int = 600

    HISTORY_PAGE_SIZE: int = 50

    class Config:
        env_file = ".env"


settings = Settings()
