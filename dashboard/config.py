from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    GATEWAY_BASE_URL: str = "http://localhost:5000"
    GATEWAY_TIMEOUT: float = 30.0
    GATEWAY_RETRIES: int = 3

    PAGE_SIZE: int = 20

    DEFAULT_PLATFORMS: list[str] = [
        "linkedin", "indeed", "glassdoor", "zip_recruiter", "monster"
    ]
    DEFAULT_FETCH_LOCATION: str = "United States"
    DEFAULT_FETCH_LIMIT: int = 20
    DEFAULT_SEARCH_TERM: str = "software engineer"

    LOG_LEVEL: str = "INFO"
    HOST: str = "127.0.0.1"
    PORT: int = 8000

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

settings = Settings()
