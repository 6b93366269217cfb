"""Modelos de domínio para alunos, turmas e quem opera o sistema.

Responsabilidades:
- Validar dados de cadastro (turmas, alunos, mudança de turma e arquivamento)
- Representar a nota disciplinar corrente do aluno
- Representar o ator (usuário) que lança registros
"""

import math
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from disciplina.config.settings import Configuracoes


class Turma(BaseModel):
    """Turma de um ano letivo."""

    id: Optional[str] = None
    nome: str = Field(..., min_length=1)
    ano_letivo: int = Field(..., ge=2000, le=2100)

    model_config = ConfigDict(from_attributes=True)


class Aluno(BaseModel):
    """Representa um aluno e sua nota disciplinar atual.

    Responsabilidades:
    - Guardar o vínculo (opcional) com a turma
    - Guardar a nota, que só muda via incremento atômico no repositório
    """

    id: Optional[str] = None
    nome: str = Field(..., min_length=1)
    matricula: Optional[str] = None
    turma_id: Optional[str] = None
    nota_disciplinar: float = Field(default_factory=lambda: Configuracoes.NOTA_INICIAL_PADRAO)
    arquivado: bool = False

    model_config = ConfigDict(from_attributes=True)


class Ator(BaseModel):
    """Usuário autenticado que executa a ação.

    A identidade vem do colaborador de autenticação; aqui só é repassada.
    """

    usuario_id: Optional[str] = None
    papel: Optional[str] = None
    privilegiado: bool = False


# --- Entradas de cadastro ----------------------------------------------------


class EntradaTurma(BaseModel):
    nome: str
    ano_letivo: int = Field(..., ge=2000, le=2100)

    @field_validator("nome")
    @classmethod
    def validar_nome(cls, valor):
        valor = (valor or "").strip()
        if not valor:
            raise ValueError("Nome da turma é obrigatório.")
        return valor


class EntradaAluno(BaseModel):
    """Cadastro de aluno.

    Sem `nota_inicial`, o aluno começa com `Configuracoes.NOTA_INICIAL_PADRAO`.
    A matrícula, quando informada, contém apenas dígitos.
    """

    nome: str
    matricula: Optional[str] = None
    turma_id: Optional[str] = None
    nota_inicial: Optional[float] = None

    @field_validator("nome")
    @classmethod
    def validar_nome(cls, valor):
        valor = (valor or "").strip()
        if not valor:
            raise ValueError("Nome do aluno é obrigatório.")
        return valor

    @field_validator("matricula", "turma_id")
    @classmethod
    def normalizar_opcional(cls, valor):
        if valor is None:
            return None
        return valor.strip() or None

    @field_validator("matricula")
    @classmethod
    def validar_matricula(cls, valor):
        if valor is not None and not valor.isdigit():
            raise ValueError("A matrícula deve conter apenas números.")
        return valor

    @field_validator("nota_inicial")
    @classmethod
    def validar_nota_inicial(cls, valor):
        if valor is not None and not math.isfinite(valor):
            raise ValueError("Nota inicial inválida.")
        return valor


class EntradaAtualizacaoAluno(BaseModel):
    """Mudança de turma e/ou (des)arquivamento."""

    turma_id: Optional[str] = None
    arquivado: Optional[bool] = None

    @field_validator("turma_id")
    @classmethod
    def validar_turma_id(cls, valor):
        if valor is None:
            return None
        valor = valor.strip()
        if not valor:
            raise ValueError("Turma de destino não pode ser vazia.")
        return valor

    @model_validator(mode="after")
    def validar_alguma_alteracao(self):
        if self.turma_id is None and self.arquivado is None:
            raise ValueError("Informe a nova turma ou o arquivamento.")
        return self
