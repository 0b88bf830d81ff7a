from typing import List

from pydantic import BaseModel, Field, field_validator


class SymptomCheckRequest(BaseModel):
    symptoms: str = Field(..., max_length=2000)

    @field_validator('symptoms')
    @classmethod
    def not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError('Symptoms are required')
        return v.strip()


class SymptomResult(BaseModel):
    condition: str
    recommendation: str


class SymptomCheckResponse(BaseModel):
    results: List[SymptomResult]
    source: str
