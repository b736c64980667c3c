from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field


class ExecutionPlan(BaseModel):
    uuid: UUID = Field(default_factory=uuid4)
    target: str
    tasks: tuple[str, ...]

    model_config = ConfigDict(extra="forbid", frozen=True)

    def index(self, name: str) -> int:
        return self.tasks.index(name)
