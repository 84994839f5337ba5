from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

from ..services.content_files import sanitize_string


class LessonGenerationInput(BaseModel):
    title: str
    description: str

    @property
    def filename(self) -> str:
        return sanitize_string(self.title)


class BatchLessonGenerationInput(BaseModel):
    lessons: list[LessonGenerationInput] = []


class LessonGenerationConfig(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    temporary_directory: Path = Field(
        default=Path("/var/tmp/contentchef"), alias="temporaryDirectory"
    )
    output_directory: Path = Field(
        default=Path("Content/Input/Lessons"), alias="outputDirectory"
    )
    model: str = "gpt-4o-mini"
    temperature: float = Field(default=0.7, ge=0.0, le=2.0)
    # Per prompt when batching
    max_tokens: int = Field(default=4000, gt=0, alias="maxTokens")


class TopicBreakdownInput(BaseModel):
    title: str
    description: str

    @property
    def filename(self) -> str:
        return sanitize_string(self.title)


class BatchTopicBreakdownInput(BaseModel):
    topics: list[TopicBreakdownInput] = []


class TopicBreakdownOutput(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    title: str
    description: str
    batch_lesson_generation_input: BatchLessonGenerationInput = Field(
        alias="batchLessonGenerationInput"
    )


class LessonGeneratedContentList(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    lesson_file_names: list[str] = Field(default=[], alias="lessonFileNames")
