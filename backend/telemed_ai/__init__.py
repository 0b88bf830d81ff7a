"""Optional LLM support for the symptom checker.

The LLM only suggests possible conditions. If it is unavailable or its output
fails validation, keyword rules answer instead.
"""

from .symptom_analyzer import analyze_symptoms, DISCLAIMER
from .fallback import analyze_symptoms_fallback

__all__ = ["analyze_symptoms", "analyze_symptoms_fallback", "DISCLAIMER"]
