from pydantic import BaseModel


class StageCatalog(BaseModel):
    """Stage names in flow order, for building selectors and filters."""

    repair_stages: list[str]
    delivery_stages: list[str]
    active_repair_stages: list[str]


class StageCount(BaseModel):
    stage: str
    count: int


class StageDashboard(BaseModel):
    """In-flight work per active repair stage."""

    stages: list[StageCount]
    unassigned: int
    total: int
