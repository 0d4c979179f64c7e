from typing import List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


class AnalyzeRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    text: Optional[str] = None
    image_url: Optional[str] = Field(default=None, alias="imageUrl")

    @property
    def has_text(self) -> bool:
        return bool(self.text and self.text.strip())

    @property
    def has_image(self) -> bool:
        return bool(self.image_url)


class AnalysisResult(BaseModel):
    result: Literal["real", "fake"]
    confidence: Union[int, float]
    keywords: List[str] = Field(default_factory=list)
    explanation: str = ""

    @field_validator("result", mode="before")
    @classmethod
    def _lower_verdict(cls, v):
        if isinstance(v, str):
            return v.strip().lower()
        return v

    @field_validator("keywords", mode="before")
    @classmethod
    def _null_keywords(cls, v):
        return [] if v is None else v

    @field_validator("explanation", mode="before")
    @classmethod
    def _null_explanation(cls, v):
        return "" if v is None else v

    @field_validator("confidence")
    @classmethod
    def _confidence_in_range(cls, v):
        if not 0 <= v <= 100:
            raise ValueError("confidence must be between 0 and 100")
        return v


class ErrorResponse(BaseModel):
    error: str
    details: Optional[str] = None


class HealthResponse(BaseModel):
    status: str
