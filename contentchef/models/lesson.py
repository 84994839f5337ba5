from pydantic import BaseModel, ConfigDict, Field


def _slug(title: str) -> str:
    return title.replace(" ", "_").lower()


class LessonSection(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    title: str
    body: str = Field(alias="content")


class LessonMetadata(BaseModel):
    model_config = ConfigDict(frozen=True)

    title: str
    description: str
    tags: list[str] = []

    @property
    def id(self) -> str:
        return _slug(self.title)


class Question(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    type: str
    proficiency: str
    question: str
    answers: list[str]
    correct_answer_index: int = Field(alias="correctAnswerIndex")
    explanation: str


class Lesson(BaseModel):
    model_config = ConfigDict(frozen=True)

    metadata: LessonMetadata
    sections: list[LessonSection] = []
    questions: list[Question] = []

    @property
    def id(self) -> str:
        return self.metadata.id


class LearningModule(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    title: str
    description: str
    sub_modules: list["LearningModule"] = Field(default=[], alias="subModules")
    lessons: list[str] = []

    @property
    def id(self) -> str:
        return _slug(self.title)


class ContentMetadata(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    last_updated_timestamp: float = Field(alias="lastUpdatedTimestamp")
