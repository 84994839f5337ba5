from pydantic import BaseModel, Field


class LintRequest(BaseModel):
    text: str


class GenerateLessonRequest(BaseModel):
    title: str = Field(min_length=1, max_length=200)
    description: str = Field(min_length=1)
