from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    redis_url: str = "redis://localhost:6379/0"
    trip_store_backend: str = "memory"  # "memory" or "redis"
    trip_ttl_seconds: int = 86400
    trip_purge_interval_seconds: int = 300
    osrm_base_url: str = "https://router.project-osrm.org"
    osrm_profile: str = "driving"
    routing_timeout_seconds: float = 10.0
    # Loose for a demo; 20-50 m suits a decent GPS receiver
    deviation_threshold_m: float = 1000.0

    model_config = {"env_prefix": "", "case_sensitive": False}


settings = Settings()
