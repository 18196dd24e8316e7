from pathlib import Path
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    data_dir: Path = Path.home() / ".jobtracker"
    # Sessions slide forward on every authenticated request.
    session_ttl_seconds: int = 86400
    # Logging in with this identity routes jobs to the session-local store.
    guest_email: str = "guest@example.com"
    min_password_length: int = 8
    day_bucket_limit: int = 30
    api_prefix: str = "/api/v1"

    @property
    def db_path(self) -> Path:
        return self.data_dir / "db.sqlite"

    model_config = {"env_prefix": "JOBTRACKER_"}


settings = Settings()
