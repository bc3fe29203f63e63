from pydantic import BaseModel


class EtaResponse(BaseModel):
    trip_id: int
    remaining_time: int  # seconds
    remaining_distance: float  # meters
    progress: float | None = None  # 0.0–1.0 along the cached path
    rerouted: bool = False
