"""Prompt construction for the synthesis pipeline."""

from .builder import StepPrompt, StepPromptBuilder, installation_command, is_api_documentation
from .constants import STEP_GOALS, STEP_ORDER, SYSTEM_PROMPT

__all__ = [
    "STEP_GOALS",
    "STEP_ORDER",
    "SYSTEM_PROMPT",
    "StepPrompt",
    "StepPromptBuilder",
    "installation_command",
    "is_api_documentation",
]
