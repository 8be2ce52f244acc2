from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional, List


class Settings(BaseSettings):
    # Supabase
    supabase_url: str = ""
    supabase_key: str = ""
    supabase_service_role_key: Optional[str] = None  # Needed to delete orphaned credentials after a failed sign-up

    # Reserved administrator login (student-facing identifier -> internal account)
    admin_identifier: str = "LibAdmin"
    admin_password: str = "12qwaszx"
    admin_email: str = "admin@library.com"
    admin_account_password: str = "admin123456"
    admin_full_name: str = "Library Administrator"

    # Coins
    starting_coin_balance: int = 100
    review_reward: int = 5
    summary_reward: int = 15
    borrow_coin_cost: int = 0  # 0 disables the charge on approval
    overdue_penalty_per_day: int = 0  # 0 disables penalties on late returns

    # Borrowing
    loan_period_days: int = 14
    max_active_issues: int = 3

    # App
    app_name: str = "library-coins-backend"
    debug: bool = False
    environment: str = "development"  # development | staging | production
    log_level: str = "INFO"
    cors_origins: str = "http://localhost:3000,http://localhost:5173,http://127.0.0.1:3000,http://127.0.0.1:5173"
    rate_limit: str = "100/minute"  # slowapi format, e.g. "100/minute"
    auth_rate_limit: str = "10/minute"
    rate_limit_enabled: bool = True

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    def get_cors_origins_list(self) -> List[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        env_prefix="",
        extra="ignore"
    )


settings = Settings()
