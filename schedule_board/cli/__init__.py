"""
Command Line Interface
"""

from .creation_form import PromptCreationForm

__all__ = [
    "PromptCreationForm",
]
