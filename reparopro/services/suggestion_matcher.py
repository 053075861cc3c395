"""
Adapter between free-text service names proposed by the AI provider and the
fixed service catalog. This is the only place that tolerates messy input.
"""
import logging
from typing import Dict, Iterable, List, Optional

from reparopro.core.catalog import AVAILABLE_SERVICES
from reparopro.core.settings import ServiceType

logger = logging.getLogger(__name__)


def match_service_template(suggested_name: str) -> Optional[Dict[str, ServiceType]]:
    """
    Return the first catalog entry whose first word appears in the suggestion
    (case-insensitive), or None when nothing matches.
    """
    if not suggested_name:
        return None
    needle = suggested_name.lower()
    for template in AVAILABLE_SERVICES:
        first_word = template["name"].lower().split(" ")[0]
        if first_word in needle:
            return template
    return None


def match_service_templates(suggested_names: Iterable[str]) -> List[Dict[str, ServiceType]]:
    matched = []
    for name in suggested_names or []:
        template = match_service_template(name)
        if template is None:
            logger.info(f"Dropping unmatched service suggestion: {name!r}")
            continue
        matched.append(template)
    return matched
