from typing import Dict, List
from pydantic import BaseModel, Field


class RepairSuggestion(BaseModel):
    """Untrusted output of the AI provider: candidate part ids plus free-text service names."""
    damaged_parts: List[str] = []
    suggested_services: Dict[str, List[str]] = {}


class RepairSuggestionRequest(BaseModel):
    description: str = Field(..., description="Descrição livre dos danos do veículo")
