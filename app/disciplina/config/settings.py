"""Configurações centrais do projeto.

Responsabilidades:
- Definir caminhos de arquivos
- Definir o backend de persistência
- Definir os limites de acúmulo de anotações
"""

import os
from pathlib import Path


class Configuracoes:
    """Centraliza configurações da aplicação.

    Responsabilidades:
    - Fornecer caminhos de diretórios
    - Declarar constantes da nota disciplinar
    - Listar papéis com permissão de lançamento
    """

    BASE_DIR = Path(__file__).resolve().parents[2]
    DEFAULT_DATA_DIR = os.path.join(BASE_DIR, "data")
    DATA_DIR = os.path.abspath(os.getenv("DATA_DIR", DEFAULT_DATA_DIR))

    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

    BACKEND_REPOSITORIO = os.getenv("BACKEND_REPOSITORIO", "memoria").strip().lower()
    DATABASE_URL = os.getenv(
        "DATABASE_URL", "sqlite:///" + os.path.join(DATA_DIR, "nota_disciplinar.db")
    )
    DATABASE_ECHO = os.getenv("DATABASE_ECHO", "false").lower() in ("1", "true", "yes")

    NOTA_INICIAL_PADRAO = float(os.getenv("NOTA_INICIAL_PADRAO", "8.0"))

    # Quantas anotações de cada gravidade geram um termo automático.
    LIMITE_ACUMULO_LEVES = int(os.getenv("LIMITE_ACUMULO_LEVES", "4"))
    LIMITE_ACUMULO_MEDIAS = int(os.getenv("LIMITE_ACUMULO_MEDIAS", "3"))

    PAPEIS_PRIVILEGIADOS = [
        papel.strip().lower()
        for papel in os.getenv("PAPEIS_PRIVILEGIADOS", "admin,monitor").split(",")
        if papel.strip()
    ]
