"""Google Gemini media understanding configuration."""

from __future__ import annotations

# Model defaults
DEFAULT_MODEL = "gemini-2.5-flash"

GEMINI_MODEL_ALIASES = {
    "gemini-flash": "gemini-2.5-flash",
    "gemini-pro": "gemini-2.5-pro",
}


def normalise_gemini_model(model: str | None) -> str:
    """Resolve short aliases and fall back to the default model."""

    if not model:
        return DEFAULT_MODEL
    candidate = str(model).strip()
    if not candidate:
        return DEFAULT_MODEL
    return GEMINI_MODEL_ALIASES.get(candidate.lower(), candidate)


__all__ = ["DEFAULT_MODEL", "GEMINI_MODEL_ALIASES", "normalise_gemini_model"]
