"""FullModel — every collection at one point in time, plus its gaps."""

from typing import List

from pydantic import BaseModel

from screenplay.models.entities import Actor, Goal, Interaction, Journey, Question, Task
from screenplay.models.gap import Gap


class FullModel(BaseModel):
    actors: List[Actor] = []
    goals: List[Goal] = []
    tasks: List[Task] = []
    interactions: List[Interaction] = []
    questions: List[Question] = []
    journeys: List[Journey] = []
    gaps: List[Gap] = []

    def entity_count(self) -> int:
        return (
            len(self.actors) + len(self.goals) + len(self.tasks)
            + len(self.interactions) + len(self.questions) + len(self.journeys)
        )
