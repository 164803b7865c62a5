"""Service Definitions - the canonical catalog every target converges on.

Invariants:
    - Order is the processing order of every reconciliation run
    - Names are unique (the only cross-store identity)
    - Entries use the legacy flat wire keys; record_normalizer handles the shape

Design Decisions:
    - In-process list instead of a seed file parsed at runtime: the catalog is small
      and versioned with the code that normalizes it
"""

_TRAVEL_CURITIBA = "Gratuito até 20 km do centro de Curitiba (excedente de R$ 1,20/km)"
_TRAVEL_CURITIBA_DRONE = "Gratuito até 20 km do centro de Curitiba (excedente de R$ 1,50/km)"
_TRAVEL_ON_LOCATION = "Sob consulta (depende da localização)"
_EDIT_ADD_ONS = "Edição Mediana, Edição Avançada"

SERVICE_DEFINITIONS: list[dict] = [
    {
        "nome": "Ensaio Fotográfico Pessoal",
        "descricao": (
            "Sessão individual em locação externa ou estúdio, ideal para redes sociais, "
            "uso profissional ou pessoal. Inclui direção de poses, correção básica de cor "
            "e entrega digital em alta resolução."
        ),
        "preco_base": 350.00,
        "duracao_media_captura": "1 a 2 horas",
        "duracao_media_tratamento": "7 dias úteis",
        "entregaveis": "20 fotos editadas em alta resolução",
        "possiveis_adicionais": _EDIT_ADD_ONS,
        "valor_deslocamento": _TRAVEL_CURITIBA,
    },
    {
        "nome": "Ensaio Externo de Casal ou Família",
        "descricao": (
            "Sessão fotográfica em ambiente externo para casais ou famílias, com foco em "
            "momentos naturais e espontâneos. Inclui direção de poses e edição básica."
        ),
        "preco_base": 450.00,
        "duracao_media_captura": "2 a 4 horas",
        "duracao_media_tratamento": "10 dias úteis",
        "entregaveis": "30 fotos editadas em alta resolução",
        "possiveis_adicionais": _EDIT_ADD_ONS,
        "valor_deslocamento": _TRAVEL_CURITIBA,
    },
    {
        "nome": "Cobertura Fotográfica de Evento Social",
        "descricao": (
            "Registro fotográfico completo de eventos sociais como aniversários, "
            "formaturas e confraternizações. Inclui edição básica e entrega digital."
        ),
        "preco_base": 800.00,
        "duracao_media_captura": "4 horas",
        "duracao_media_tratamento": "10 dias úteis",
        "entregaveis": "40 fotos editadas em alta resolução",
        "possiveis_adicionais": _EDIT_ADD_ONS,
        "valor_deslocamento": _TRAVEL_CURITIBA,
    },
    {
        "nome": "Filmagem de Evento Social (Solo)",
        "descricao": (
            "Captação de vídeo para eventos sociais, incluindo edição básica com trilha "
            "sonora e entrega em formato digital de alta qualidade."
        ),
        "preco_base": 1200.00,
        "duracao_media_captura": "4 horas",
        "duracao_media_tratamento": "14 dias úteis",
        "entregaveis": "Vídeo editado de 3-5 minutos em alta resolução",
        "possiveis_adicionais": _EDIT_ADD_ONS,
        "valor_deslocamento": _TRAVEL_CURITIBA,
    },
    {
        "nome": "Fotografia Aérea com Drone",
        "descricao": (
            "Captura de imagens aéreas de propriedades, eventos ou locações, com "
            "equipamento profissional e piloto certificado."
        ),
        "preco_base": 700.00,
        "duracao_media_captura": "1 a 2 horas",
        "duracao_media_tratamento": "7 dias úteis",
        "entregaveis": "15 fotos em alta resolução com edição básica",
        "possiveis_adicionais": _EDIT_ADD_ONS,
        "valor_deslocamento": _TRAVEL_CURITIBA_DRONE,
    },
    {
        "nome": "Filmagem Aérea com Drone",
        "descricao": (
            "Captação de vídeos aéreos para imóveis, eventos ou projetos especiais, com "
            "equipamento profissional e piloto certificado."
        ),
        "preco_base": 900.00,
        "duracao_media_captura": "1 a 2 horas",
        "duracao_media_tratamento": "10 dias úteis",
        "entregaveis": "Vídeo editado de 1-2 minutos em alta resolução",
        "possiveis_adicionais": _EDIT_ADD_ONS,
        "valor_deslocamento": _TRAVEL_CURITIBA_DRONE,
    },
    {
        "nome": "Pacote VLOG Family (Ilha do Mel ou Outros Lugares)",
        "descricao": (
            "Documentação em vídeo e foto da sua viagem em família, com edição "
            "profissional e entrega em formato digital."
        ),
        "preco_base": 1500.00,
        "duracao_media_captura": "4 a 6 horas",
        "duracao_media_tratamento": "14 dias úteis",
        "entregaveis": "Vídeo editado de 3-5 minutos + 30 fotos em alta resolução",
        "possiveis_adicionais": _EDIT_ADD_ONS,
        "valor_deslocamento": _TRAVEL_ON_LOCATION,
    },
    {
        "nome": "Pacote VLOG Friends & Community",
        "descricao": (
            "Cobertura fotográfica e de vídeo para grupos de amigos ou comunidades, "
            "perfeita para registrar viagens, encontros ou eventos colaborativos."
        ),
        "preco_base": 1800.00,
        "duracao_media_captura": "6 a 8 horas",
        "duracao_media_tratamento": "14 dias úteis",
        "entregaveis": "Vídeo editado de 5-7 minutos + 40 fotos em alta resolução",
        "possiveis_adicionais": _EDIT_ADD_ONS,
        "valor_deslocamento": _TRAVEL_ON_LOCATION,
    },
]


def load_service_definitions() -> list[dict]:
    """Fresh copies, so a run can never mutate the module-level catalog."""
    return [dict(definition) for definition in SERVICE_DEFINITIONS]
