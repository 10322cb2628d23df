"""Script classifier factory."""

from beyond_mask.core.config import settings
from beyond_mask.services.language.base import BaseScriptClassifier, ScriptTag

__all__ = ["BaseScriptClassifier", "ScriptTag", "get_script_classifier"]


def get_script_classifier() -> BaseScriptClassifier:
    """Returns the configured script classifier."""
    if settings.script_classifier == "majority":
        from beyond_mask.services.language.majority import MajorityScriptClassifier
        return MajorityScriptClassifier()
    else:
        raise ValueError(f"Unknown script classifier: {settings.script_classifier}")
