"""Modelos de leitura da nota disciplinar.

Responsabilidades:
- Representar a faixa (grau) de exibição de uma nota
- Representar o histórico consolidado de um aluno
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from disciplina.domain.records import CategoriaHistorico


class FaixaNota(BaseModel):
    """Grau de exibição de uma nota (rótulo, cor, ícone, barra de progresso)."""

    rotulo: str
    cor: str
    icone: str
    percentual_progresso: float
    mensagem: str

    model_config = ConfigDict(frozen=True)


class ItemHistorico(BaseModel):
    """Linha do histórico do aluno, independente da categoria de origem.

    `peso` é a contribuição assinada do registro para a nota.
    """

    id: str
    categoria: CategoriaHistorico
    tipo: str
    rotulo: str
    descricao: str = ""
    peso: float = 0.0
    criado_em: Optional[datetime] = None
    ano_letivo: Optional[int] = None
    lancado_por: Optional[str] = None


class HistoricoAluno(BaseModel):
    aluno_id: str
    nome: str
    nota_disciplinar: float
    nota_formatada: str
    faixa: FaixaNota
    anos_disponiveis: List[int] = Field(default_factory=list)
    itens: List[ItemHistorico] = Field(default_factory=list)
