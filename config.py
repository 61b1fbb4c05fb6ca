from decimal import Decimal
from dotenv import load_dotenv
from pydantic_settings import BaseSettings

load_dotenv()

class Settings(BaseSettings):
    DATABASE_URL: str = "sqlite:///./ledger.db"

    ENABLE_TCS: bool = False
    SALE_TCS_PERCENT: Decimal = Decimal("0")
    PURCHASE_TCS_PERCENT: Decimal = Decimal("0")

    LOW_STOCK_DEFAULT: int = 10
    TRAILING_MONTHS: int = 9
    RECYCLE_BIN_DAYS: int = 30

    LOG_LEVEL: str = "INFO"


    class Config:
        env_file = ".env"
        extra = "ignore"

settings = Settings()
