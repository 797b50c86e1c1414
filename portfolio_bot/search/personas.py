# Load personas from personas.yaml next to this module.

from __future__ import annotations

import os
from functools import lru_cache
from typing import Any, Dict, Optional

import yaml

from portfolio_bot.errors import ConfigurationError
from .types import FallbackTable, Notices, Persona

PERSONAS_PATH = os.path.join(os.path.dirname(__file__), "personas.yaml")
TEMPLATE_SLOTS = ("{context}", "{question}")


def _read_personas(path: str) -> Dict[str, Any]:
    if not os.path.exists(path):
        raise ConfigurationError(f"personas file not found at {path}")
    with open(path, "r", encoding="utf-8") as f:
        try:
            data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(f"personas file at {path} is not valid YAML: {e}") from e
    if not isinstance(data, dict):
        raise ConfigurationError(f"personas file at {path} must map persona keys to definitions")
    return data


def parse_persona(key: str, raw: Dict[str, Any]) -> Persona:
    template = raw.get("template", "")
    for slot in TEMPLATE_SLOTS:
        if slot not in template:
            raise ConfigurationError(f"Persona '{key}' template is missing the {slot} slot")

    responses = dict(raw.get("responses") or {})
    keywords = {str(k).lower(): v for k, v in ((raw.get("fallback") or {}).get("keywords") or {}).items()}
    if "default" not in responses:
        raise ConfigurationError(f"Persona '{key}' has no default fallback response")
    unknown = sorted(set(keywords.values()) - set(responses))
    if unknown:
        raise ConfigurationError(f"Persona '{key}' maps keywords to unknown responses: {unknown}")

    notices = raw.get("notices") or {}
    try:
        parsed_notices = Notices(
            ask_prompt=notices["ask_prompt"],
            rate_limited=notices["rate_limited"],
            server_error=notices["server_error"],
            invalid_request=notices["invalid_request"],
        )
    except KeyError as e:
        raise ConfigurationError(f"Persona '{key}' is missing notice {e}") from e

    return Persona(
        key=key,
        name=raw.get("name", key),
        template=template,
        fallback=FallbackTable(keywords=keywords, responses=responses),
        notices=parsed_notices,
        suggestions=list(raw.get("suggestions") or []),
    )


@lru_cache(maxsize=8)
def load_persona(key: str, path: Optional[str] = None) -> Persona:
    """Load and validate one persona from personas.yaml."""
    data = _read_personas(path or PERSONAS_PATH)
    if key not in data:
        raise ConfigurationError(f"Persona '{key}' not found in personas.yaml")
    return parse_persona(key, data[key])
