"""
Planning narrative for a computed isochrone, generated by Gemini.

Entirely optional: a failed call is logged and yields None so the
isochrone itself is never affected.
"""

import logging
from typing import Any, Dict, Optional

import requests

from .schemas import IsochroneParams

logger = logging.getLogger(__name__)

GEMINI_API = "https://generativelanguage.googleapis.com/v1beta"


def build_prompt(params: IsochroneParams) -> str:
    return (
        f"As an Urban Planning Assistant, explain the significance of a {params.minutes}-minute "
        f"{params.mode} isochrone at latitude {params.lat}, longitude {params.lng} in the "
        'Indonesian context. Mention the "15-minute city" concept if applicable. '
        "Keep it concise (3 sentences)."
    )


class GeminiNarrator:
    def __init__(
        self,
        api_key: str,
        model: str,
        timeout_s: float = 30,
        session: Optional[requests.Session] = None,
    ):
        self.api_key = api_key
        self.model = model
        self.timeout_s = timeout_s
        self.session = session or requests.Session()

    def describe(self, params: IsochroneParams, polygon: Dict[str, Any]) -> Optional[str]:
        url = f"{GEMINI_API}/models/{self.model}:generateContent"
        payload = {"contents": [{"parts": [{"text": build_prompt(params)}]}]}
        try:
            resp = self.session.post(
                url,
                params={"key": self.api_key},
                json=payload,
                timeout=self.timeout_s,
            )
            resp.raise_for_status()
            data = resp.json()
            parts = data["candidates"][0]["content"]["parts"]
            text = "".join(p.get("text", "") for p in parts).strip()
            return text or None
        except (requests.RequestException, ValueError, KeyError, IndexError, TypeError, AttributeError) as e:
            logger.error(f"AI analysis failed: {e}")
            return None
