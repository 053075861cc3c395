import json
import logging
from typing import Any, Optional

from openai import AsyncOpenAI
from pydantic import ValidationError
from tenacity import retry, stop_after_attempt, wait_exponential

from reparopro.config import settings
from reparopro.core.catalog import AVAILABLE_SERVICES, CAR_PARTS
from reparopro.exceptions.errors import ExternalServiceFailure, ValidationRejected
from reparopro.schemas.suggestion import RepairSuggestion

logger = logging.getLogger(__name__)

CAR_PART_IDS = [part["id"] for part in CAR_PARTS]

SYSTEM_PROMPT = "Você é um assistente de orçamentos de funilaria e pintura automotiva."

PROMPT_TEMPLATE = """Analisando a seguinte descrição de danos em um veículo, identifique as peças danificadas e sugira os serviços de reparo necessários.
Descrição: "{description}"

Use somente estes IDs de peças: {part_ids}
Serviços disponíveis: {service_names}

Responda apenas em JSON no formato:
{{"damagedParts": ["<id da peça>"], "suggestedServices": {{"<id da peça>": ["<nome do serviço>"]}}}}
"""


class RepairSuggestionService:
    """Asks the language model which parts are damaged and which services they need."""

    def __init__(self, client: Optional[Any] = None, model: Optional[str] = None):
        self._client = client
        self.model = model or settings.OPENAI_MODEL

    @property
    def client(self):
        if self._client is None:
            if not settings.OPENAI_API_KEY:
                raise ExternalServiceFailure("A chave da API de IA não está configurada.")
            self._client = AsyncOpenAI(api_key=settings.OPENAI_API_KEY, timeout=settings.OPENAI_TIMEOUT)
        return self._client

    async def suggest(self, description: str) -> RepairSuggestion:
        if not description or not description.strip():
            raise ValidationRejected("Por favor, descreva os danos.")

        client = self.client
        try:
            content = await self._complete(client, self._build_prompt(description))
        except Exception as e:
            logger.error(f"Error calling suggestion provider: {str(e)}")
            raise ExternalServiceFailure("Falha ao obter sugestões da IA.") from e

        return self._parse(content)

    @staticmethod
    def _build_prompt(description: str) -> str:
        return PROMPT_TEMPLATE.format(
            description=description.strip(),
            part_ids=", ".join(CAR_PART_IDS),
            service_names=", ".join(service["name"] for service in AVAILABLE_SERVICES),
        )

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=1, max=8),
        reraise=True
    )
    async def _complete(self, client, prompt: str) -> str:
        response = await client.chat.completions.create(
            model=self.model,
            messages=[
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": prompt}
            ],
            response_format={"type": "json_object"},
            temperature=0.1
        )
        return response.choices[0].message.content

    @staticmethod
    def _parse(content: str) -> RepairSuggestion:
        try:
            raw = json.loads(content or "{}")
            return RepairSuggestion(
                damaged_parts=raw.get("damagedParts") or [],
                suggested_services=raw.get("suggestedServices") or {},
            )
        except (json.JSONDecodeError, AttributeError, ValidationError) as e:
            logger.error(f"Unparsable suggestion payload: {content!r}")
            raise ExternalServiceFailure("Falha ao obter sugestões da IA.") from e
