"""Template Service: counselling prompt selection.

Chooses the system prompt that steers the external reply generator, based
on the message risk score, session length and topic keywords.
"""

from .selector import TemplateSelector
from .templates import TemplateCatalogue, DEFAULT_TEMPLATES, DEFAULT_TEMPLATE

__all__ = [
    "TemplateSelector",
    "TemplateCatalogue",
    "DEFAULT_TEMPLATES",
    "DEFAULT_TEMPLATE",
]
