"""Keyword rules used when the LLM is disabled or its output is unusable."""
import logging
from typing import Dict, List

logger = logging.getLogger(__name__)

GENERAL_RESULT = {
    "condition": "General Symptoms",
    "recommendation": "Please consult a healthcare professional for proper diagnosis and treatment.",
}


def analyze_symptoms_fallback(symptoms: str) -> List[Dict[str, str]]:
    """
    Match combinations of keywords to a few common conditions.

    Always returns at least one result; unmatched input gets the general advice.
    """
    text = symptoms.lower()
    results: List[Dict[str, str]] = []

    if "fever" in text and "cough" in text:
        results.append({
            "condition": "Common Cold",
            "recommendation": "Rest, hydrate, and consider over-the-counter cold medication.",
        })

    if "headache" in text and "nausea" in text:
        results.append({
            "condition": "Migraine",
            "recommendation": "Rest in a dark, quiet room. Consider pain relievers and consult a doctor if severe.",
        })

    if "stomach pain" in text or "diarrhea" in text:
        results.append({
            "condition": "Gastroenteritis (Stomach Flu)",
            "recommendation": "Stay hydrated with clear fluids. Eat bland foods. Seek medical advice if symptoms persist.",
        })

    if not results:
        results.append(dict(GENERAL_RESULT))

    logger.info(f"Fallback symptom analysis: {[r['condition'] for r in results]}")
    return results
