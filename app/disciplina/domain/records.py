"""Modelos de domínio dos registros disciplinares.

Responsabilidades:
- Declarar os vocabulários fechados (gravidade, tipo de elogio, categoria)
- Validar entradas de lançamento antes de qualquer escrita
- Representar registros persistidos e resultados dos fluxos
"""

from datetime import date, datetime
from enum import Enum
from typing import List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class GravidadeAnotacao(str, Enum):
    """Gravidade de anotações e termos, em ordem crescente."""

    LEVE = "leve"
    MEDIA = "media"
    GRAVE = "grave"
    GRAVISSIMA = "gravissima"


class TipoElogio(str, Enum):
    COLETIVO = "coletivo"
    INDIVIDUAL = "individual"
    MENCAO_HONROSA = "mencao_honrosa"


class CategoriaHistorico(str, Enum):
    ANOTACAO = "anotacao"
    ELOGIO = "elogio"
    TERMO = "termo"
    FALTA = "falta"


def _texto_obrigatorio(valor: str) -> str:
    valor = (valor or "").strip()
    if not valor:
        raise ValueError("Campo obrigatório não pode ser vazio.")
    return valor


def _texto_opcional(valor: Optional[str]) -> Optional[str]:
    if valor is None:
        return None
    valor = valor.strip()
    return valor or None


# --- Registros persistidos -------------------------------------------------


class Anotacao(BaseModel):
    """Anotação disciplinar. Imutável após criada (só pode ser excluída)."""

    id: Optional[str] = None
    aluno_id: str
    gravidade: GravidadeAnotacao
    descricao: str
    criado_em: Optional[datetime] = None
    ano_letivo: Optional[int] = None
    lancado_por: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class Elogio(BaseModel):
    """Elogio. `valor` é o bônus efetivamente aplicado na criação."""

    id: Optional[str] = None
    aluno_id: str
    tipo: TipoElogio
    valor: float = Field(..., ge=0)
    descricao: Optional[str] = None
    criado_em: Optional[datetime] = None
    ano_letivo: Optional[int] = None
    lancado_por: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class Termo(BaseModel):
    """Termo gerado por anotação grave/gravíssima ou por acúmulo.

    `valor_desconto` é gravado explicitamente e é o valor usado para
    reverter a nota quando o termo é excluído.
    """

    id: Optional[str] = None
    aluno_id: str
    gravidade: GravidadeAnotacao
    valor_desconto: float = Field(..., ge=0)
    motivo: Optional[str] = None
    criado_em: Optional[datetime] = None
    ano_letivo: Optional[int] = None

    model_config = ConfigDict(from_attributes=True)


class Falta(BaseModel):
    """Falta por período. Não afeta a nota."""

    id: Optional[str] = None
    aluno_id: str
    data_inicio: date
    data_fim: date
    motivo: str
    detalhes: Optional[str] = None
    criado_em: Optional[datetime] = None
    ano_letivo: Optional[int] = None
    lancado_por: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


RegistroDisciplinar = Union[Anotacao, Elogio, Termo, Falta]


class TermoAGerar(BaseModel):
    """Termo decidido pelo avaliador de acúmulo, ainda não persistido."""

    gravidade: GravidadeAnotacao
    valor_desconto: float
    motivo: str

    model_config = ConfigDict(frozen=True)


# --- Entradas ----------------------------------------------------------------


class EntradaAnotacao(BaseModel):
    gravidade: GravidadeAnotacao
    descricao: str

    @field_validator("descricao")
    @classmethod
    def validar_descricao(cls, valor):
        return _texto_obrigatorio(valor)


class EntradaElogio(BaseModel):
    tipo: TipoElogio
    descricao: Optional[str] = None

    @field_validator("descricao")
    @classmethod
    def validar_descricao(cls, valor):
        return _texto_opcional(valor)


class EntradaFalta(BaseModel):
    data_inicio: date
    data_fim: date
    motivo: str
    detalhes: Optional[str] = None

    @field_validator("motivo")
    @classmethod
    def validar_motivo(cls, valor):
        return _texto_obrigatorio(valor)

    @field_validator("detalhes")
    @classmethod
    def validar_detalhes(cls, valor):
        return _texto_opcional(valor)

    @model_validator(mode="after")
    def validar_periodo(self):
        if self.data_fim < self.data_inicio:
            raise ValueError("Data fim deve ser maior ou igual à data início.")
        return self


class OperacaoLote(BaseModel):
    """Operação aplicada a todos os alunos ativos de uma turma.

    - tipo "anotacao": exige `gravidade` e `descricao`
    - tipo "elogio": exige `tipo_elogio`; `descricao` é opcional
    """

    tipo: Literal["anotacao", "elogio"]
    gravidade: Optional[GravidadeAnotacao] = None
    tipo_elogio: Optional[TipoElogio] = None
    descricao: Optional[str] = None

    @field_validator("descricao")
    @classmethod
    def validar_descricao(cls, valor):
        return _texto_opcional(valor)

    @model_validator(mode="after")
    def validar_campos_do_tipo(self):
        if self.tipo == "anotacao":
            if self.gravidade is None:
                raise ValueError("Operação de anotação exige a gravidade.")
            if not self.descricao:
                raise ValueError("Operação de anotação exige a descrição.")
        elif self.tipo_elogio is None:
            raise ValueError("Operação de elogio exige o tipo de elogio.")
        return self


# --- Resultados --------------------------------------------------------------


class ResultadoRegistro(BaseModel):
    """Resultado de um lançamento individual."""

    categoria: CategoriaHistorico
    registro: RegistroDisciplinar
    termos_gerados: List[Termo] = Field(default_factory=list)
    delta: float = 0.0
    nota_atual: Optional[float] = None


class ResultadoExclusao(BaseModel):
    categoria: CategoriaHistorico
    registro_id: str
    aluno_id: str
    delta: float = 0.0
    nota_atual: Optional[float] = None


class ResultadoLoteAluno(BaseModel):
    """Desfecho de um aluno dentro de uma operação em lote.

    `etapa` indica onde a falha ocorreu: "registro" (nada foi gravado) ou
    "nota"/"termo" (registro gravado, nota possivelmente dessincronizada).
    """

    aluno_id: str
    nome: Optional[str] = None
    sucesso: bool
    etapa: Optional[str] = None
    erro: Optional[str] = None
    registro_id: Optional[str] = None
    nota_atual: Optional[float] = None


class ResumoLote(BaseModel):
    turma_id: str
    operacao: str
    total: int = 0
    sucessos: int = 0
    falhas: int = 0
    resultados: List[ResultadoLoteAluno] = Field(default_factory=list)
