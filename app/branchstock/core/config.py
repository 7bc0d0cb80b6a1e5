from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env")

    APP_NAME: str = "BRANCHSTOCK"
    SECRET_KEY: str = "change-me"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24 * 7
    DATABASE_URL: str = "sqlite+pysqlite:///./branchstock.db"
    METRICS_ENABLED: bool = True
    TRANSFERS_DEFAULT_PAGE_SIZE: int = 20
    STOCK_MOVEMENTS_DEFAULT_PAGE_SIZE: int = 50
    INVENTORY_DEFAULT_PAGE_SIZE: int = 20
    LIST_MAX_PAGE_SIZE: int = 200
    DEFAULT_MIN_STOCK_LEVEL: int = 0
    DEFAULT_MAX_STOCK_LEVEL: int = 1000
    OWNER_EMAIL: str = "owner@example.com"
    OWNER_FULL_NAME: str = "Store Owner"
    OWNER_PASSWORD: str = "change-me"
    DEFAULT_BRANCHES: str = "franko:Franko,mebrathayl:Mebrat Hayl"

settings = Settings()
