from typing import Dict, List, Optional

from reparopro.core.settings import PaymentMethod, ServiceType

CAR_PARTS: List[Dict[str, str]] = [
    {"id": "front-bumper", "name": "Para-choque Dianteiro"},
    {"id": "hood", "name": "Capô"},
    {"id": "front-left-fender", "name": "Para-lama Dianteiro Esquerdo"},
    {"id": "front-right-fender", "name": "Para-lama Dianteiro Direito"},
    {"id": "front-left-door", "name": "Porta Dianteira Esquerda"},
    {"id": "front-right-door", "name": "Porta Dianteira Direita"},
    {"id": "rear-left-door", "name": "Porta Traseira Esquerda"},
    {"id": "rear-right-door", "name": "Porta Traseira Direita"},
    {"id": "roof", "name": "Teto"},
    {"id": "trunk", "name": "Porta-malas"},
    {"id": "rear-bumper", "name": "Para-choque Traseiro"},
    {"id": "rear-left-fender", "name": "Para-lama Traseiro Esquerdo"},
    {"id": "rear-right-fender", "name": "Para-lama Traseiro Direito"},
    {"id": "left-rocker-panel", "name": "Saia Lateral Esquerda"},
    {"id": "right-rocker-panel", "name": "Saia Lateral Direita"},
]

AVAILABLE_SERVICES: List[Dict[str, ServiceType]] = [
    {"name": "Desamassar (Pequeno)", "type": ServiceType.BODYWORK},
    {"name": "Desamassar (Grande)", "type": ServiceType.BODYWORK},
    {"name": "Solda Plástica", "type": ServiceType.BODYWORK},
    {"name": "Alinhamento de Painel", "type": ServiceType.BODYWORK},
    {"name": "Aplicação de Massa", "type": ServiceType.PREP},
    {"name": "Lixamento", "type": ServiceType.PREP},
    {"name": "Aplicação de Primer", "type": ServiceType.PREP},
    {"name": "Pintura (Base)", "type": ServiceType.PAINT},
    {"name": "Aplicação de Verniz", "type": ServiceType.PAINT},
    {"name": "Polimento", "type": ServiceType.FINISHING},
    {"name": "Espelhamento", "type": ServiceType.FINISHING},
]

AVAILABLE_MATERIALS: List[str] = [
    "Tinta (ml)",
    "Verniz (ml)",
    "Primer (ml)",
    "Massa Poliéster (g)",
    "Lixa (unidade)",
    "Fita Crepe (rolo)",
    "Desengraxante (ml)",
]

PAYMENT_METHODS = {
    PaymentMethod.PIX: "PIX",
    PaymentMethod.DEBIT: "Cartão de Débito",
    PaymentMethod.CREDIT: "Cartão de Crédito",
}

# Progress labels offered to staff when posting a timeline update
SERVICE_STATUSES = [
    "Em Análise",
    "Aguardando Peças",
    "Em Funilaria",
    "Em Preparação",
    "Em Pintura",
    "Em Montagem",
    "Polimento",
    "Controle de Qualidade",
    "Pronto para Retirada",
    "Concluído",
]

WORK_ORDER_SEED_STATUS = "OS Gerada"
WORK_ORDER_SEED_DESCRIPTION = "Ordem de serviço gerada e aguardando início dos reparos."
PORTAL_IDLE_STATUS = "Aguardando início"

DEFAULT_TERMS = """1. Esta Ordem de Serviço é válida a partir da data de sua emissão e autoriza a ReparoPro Oficina a executar os serviços descritos.
2. O cliente declara estar ciente de que o prazo de entrega é uma estimativa e pode sofrer alterações.
3. A garantia dos serviços de mão de obra é de 90 dias. Peças e materiais seguem a garantia do fabricante.
4. A oficina não se responsabiliza por objetos deixados no interior do veículo.
5. O pagamento deve ser realizado conforme as condições acordadas e descritas no orçamento."""

STATUS_LABELS = {
    "pending": "Pendente",
    "approved": "Aprovado",
    "denied": "Recusado",
    "os-generated": "OS Gerada",
    "em-andamento": "Em Andamento",
    "concluido": "Concluído",
}


def find_car_part(part_id: str) -> Optional[Dict[str, str]]:
    return next((part for part in CAR_PARTS if part["id"] == part_id), None)


def find_service_template(name: str) -> Optional[Dict[str, ServiceType]]:
    """Exact lookup by catalog name, used for manual selection."""
    return next((service for service in AVAILABLE_SERVICES if service["name"] == name), None)
