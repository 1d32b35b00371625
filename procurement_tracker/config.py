from pydantic_settings import BaseSettings
from functools import lru_cache

class Settings(BaseSettings):
    lookup_base_url: str = "http://localhost:8055"
    department_path: str = "/items/department"
    user_path: str = "/items/user"
    lookup_timeout_seconds: float = 10.0
    seed_sample_requests: bool = True
    stream_poll_interval: float = 0.5

    @property
    def department_url(self) -> str:
        return f"{self.lookup_base_url.rstrip('/')}{self.department_path}"

    @property
    def user_url(self) -> str:
        return f"{self.lookup_base_url.rstrip('/')}{self.user_path}"

    class Config:
        env_file = ".env"

@lru_cache
def get_settings() -> Settings:
    return Settings()
