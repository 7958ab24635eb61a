from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    app_name: str = "Hiworks Commute Worker"
    log_level: str = "INFO"

    config_dir: Path = Field(default_factory=lambda: Path.home() / ".hiworks-commute")

    work_page_url: str = "https://hr-work.office.hiworks.com/personal/index"
    authenticated_domain: str = "office.hiworks.com"
    login_marker: str = "login"
    main_page_marker: str = "/main"

    browser_headless: bool = True
    browser_locale: str = "en-US"
    viewport_width: int = 1280
    viewport_height: int = 800

    # Bounded waits (milliseconds).
    element_timeout_ms: int = 10000
    prompt_timeout_ms: int = 5000
    pre_login_wait_ms: int = 1000
    secret_fill_pause_ms: int = 500
    login_settle_ms: int = 2000
    action_settle_ms: int = 2000

    # When true the action is skipped if its button is already disabled.
    check_in_skip_if_done: bool = True
    check_out_skip_if_done: bool = False

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="HIWORKS_",
        extra="ignore",
    )

    @property
    def config_file(self) -> Path:
        return self.config_dir / "config.json"

    @property
    def browser_data_dir(self) -> Path:
        return self.config_dir / "browser-data"

    @property
    def browser_args(self) -> list[str]:
        return [
            "--disable-blink-features=AutomationControlled",
            f"--lang={self.browser_locale}",
            "--disable-features=Translate,TranslateUI",
            "--disable-translate",
        ]


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
