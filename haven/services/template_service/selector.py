"""Template selector - picks a counselling template for a message.

Rules are evaluated top to bottom and the first match wins:
1. risk > 0.8 -> crisis
2. risk > 0.6 -> high-risk
3. session_length <= 2 -> initial-session
4-8. emotional, anxiety, depression, coping, relationship keywords
9. default

A rule naming a template the catalogue lacks resolves to "default".
"""
import logging
from typing import Iterable, List, Optional

from haven.shared.models import ConversationContext, Template
from .templates import (
    ANXIETY_TEMPLATE,
    COPING_TEMPLATE,
    CRISIS_TEMPLATE,
    DEFAULT_TEMPLATE,
    DEPRESSION_TEMPLATE,
    EMOTIONAL_TEMPLATE,
    HIGH_RISK_TEMPLATE,
    INITIAL_SESSION_TEMPLATE,
    RELATIONSHIP_TEMPLATE,
    TemplateCatalogue,
)

logger = logging.getLogger(__name__)


CRISIS_RISK_THRESHOLD = 0.8
HIGH_RISK_THRESHOLD = 0.6
INITIAL_SESSION_LENGTH = 2


class TemplateSelector:
    """Deterministic template selection over a TemplateCatalogue."""

    def __init__(self, catalogue: Optional[TemplateCatalogue] = None):
        self.catalogue = catalogue or TemplateCatalogue()

    def get(self, name: str) -> Optional[Template]:
        return self.catalogue.templates.get(name)

    def all_templates(self) -> List[Template]:
        return list(self.catalogue.templates.values())

    def select(self, context: ConversationContext) -> Template:
        """Select the template for a conversation context.

        Args:
            context: Message text, risk score (0.0-1.0) and session length

        Returns:
            The matched template, or the default template
        """
        name = self._match(context)
        template = self.get(name)

        if template is None:
            logger.warning(
                "TEMPLATE_MISSING",
                extra={"requested": name, "fallback": DEFAULT_TEMPLATE}
            )
            template = self.catalogue.templates[DEFAULT_TEMPLATE]

        logger.info(
            "TEMPLATE_SELECTED",
            extra={
                "template": template.name,
                "risk_level": context.risk_level,
                "session_length": context.session_length,
            }
        )
        return template

    def _match(self, context: ConversationContext) -> str:
        if context.risk_level > CRISIS_RISK_THRESHOLD:
            return CRISIS_TEMPLATE
        if context.risk_level > HIGH_RISK_THRESHOLD:
            return HIGH_RISK_TEMPLATE
        if context.session_length <= INITIAL_SESSION_LENGTH:
            return INITIAL_SESSION_TEMPLATE

        text = (context.message_content or "").lower()
        c = self.catalogue
        for keywords, name in (
            (c.emotional_keywords, EMOTIONAL_TEMPLATE),
            (c.anxiety_keywords, ANXIETY_TEMPLATE),
            (c.depression_keywords, DEPRESSION_TEMPLATE),
            (c.coping_keywords, COPING_TEMPLATE),
            (c.relationship_keywords, RELATIONSHIP_TEMPLATE),
        ):
            if _contains_any(text, keywords):
                return name

        return DEFAULT_TEMPLATE


def _contains_any(text: str, keywords: Iterable[str]) -> bool:
    return any(keyword in text for keyword in keywords)
