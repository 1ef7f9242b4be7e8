from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",  # щоб не падало від зайвих полів
    )

    app_version: str = "dev"
    frontend_origin: Optional[str] = None

    # бекенд бота для сповіщень (POST {tg_id, text}); порожньо - тільки лог
    bot_notify_url: Optional[str] = None

    # заданий - гравці/бої/лоти живуть у Redis, інакше в пам'яті процесу
    redis_url: Optional[str] = None

    seed_demo_players: bool = True
    log_level: str = "INFO"


settings = Settings()
