from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    database_url: str = "sqlite+aiosqlite:///./gapsboard.db"
    database_echo: bool = False

    # Повторные попытки при конфликте транзакций
    max_retries: int = 3
    retry_backoff: float = 0.05

    # Проверка инварианта позиций перед коммитом (для отладки)
    verify_invariant: bool = False

    log_level: str = "INFO"

    model_config = {"env_file": ".env", "env_prefix": "GAPSBOARD_", "extra": "ignore"}

settings = Settings()
