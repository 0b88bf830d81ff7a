"""Schema for validating LLM symptom output. Anything else triggers the fallback."""

from typing import List

from pydantic import BaseModel, Field, field_validator


class SymptomAssessment(BaseModel):
    condition: str = Field(..., min_length=1, max_length=120)
    recommendation: str = Field(..., min_length=1, max_length=600)

    @field_validator("condition", "recommendation")
    @classmethod
    def strip_text(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("must not be blank")
        return v


class SymptomAssessmentList(BaseModel):
    items: List[SymptomAssessment] = Field(..., min_length=1, max_length=5)
