"""
Symptom analysis: optional Groq LLM call, keyword rules otherwise.

LLM output is never trusted blindly: it must parse as a JSON array and
validate against SymptomAssessment, or the keyword fallback is used.
Every recommendation carries the medical disclaimer.
"""

import json
import logging
from typing import Dict, List, Optional

from pydantic import ValidationError

from .fallback import analyze_symptoms_fallback
from .groq_client import GroqClient, get_groq_client
from .prompts import build_symptom_prompt
from .schema import SymptomAssessmentList

logger = logging.getLogger(__name__)

DISCLAIMER = (
    "**Disclaimer: This is not a substitute for professional medical advice. "
    "Please consult a healthcare provider for proper diagnosis and treatment.**"
)


def analyze_symptoms(symptoms: str, client: Optional[GroqClient] = None) -> Dict[str, object]:
    """
    Returns:
        {"results": [{"condition": str, "recommendation": str}, ...],
         "source": "llm" | "fallback"}
    """
    symptoms = symptoms.strip()
    client = client or get_groq_client()

    results = None
    source = "fallback"
    if client.is_available():
        raw = client.complete(build_symptom_prompt(symptoms))
        if raw:
            results = _parse_llm_output(raw)
        if results:
            source = "llm"
        else:
            logger.debug("LLM output unusable - using fallback")

    if not results:
        results = analyze_symptoms_fallback(symptoms)

    return {
        "results": [
            {
                "condition": r["condition"],
                "recommendation": f"{r['recommendation']} {DISCLAIMER}",
            }
            for r in results
        ],
        "source": source,
    }


def _parse_llm_output(raw: str) -> Optional[List[Dict[str, str]]]:
    """Strip markdown fences, parse JSON, validate. None if anything is off."""
    text = raw.strip()
    if text.startswith("```"):
        lines = text.split("\n")[1:]
        if lines and lines[-1].strip() == "```":
            lines = lines[:-1]
        text = "\n".join(lines).strip()

    try:
        data = json.loads(text)
        parsed = SymptomAssessmentList(items=data)
    except json.JSONDecodeError as e:
        logger.warning(f"Invalid JSON from LLM: {e}")
        return None
    except ValidationError as e:
        logger.warning(f"LLM output failed schema validation: {e.error_count()} errors")
        return None

    return [item.model_dump() for item in parsed.items]
