"""Symptom checker. Guidance only, never a diagnosis."""
from fastapi import APIRouter, Depends

from telemed.api.deps import get_current_user
from telemed.models.user import User
from telemed.schemas.symptoms import SymptomCheckRequest, SymptomCheckResponse
from telemed_ai import analyze_symptoms

router = APIRouter()


@router.post("/check", response_model=SymptomCheckResponse)
def check_symptoms(data: SymptomCheckRequest, current_user: User = Depends(get_current_user)):
    return analyze_symptoms(data.symptoms)
