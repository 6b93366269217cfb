"""Mapeamento de nota para faixa de exibição.

Responsabilidades:
- Classificar a nota em uma das cinco faixas (limites inferiores inclusivos)
- Calcular o percentual da barra de progresso
- Formatar a nota para exibição
"""

import math
from typing import List, NamedTuple

from disciplina.domain.errors import ErroValidacao
from disciplina.domain.grade import FaixaNota

PROGRESSO_MINIMO = -5.0
PROGRESSO_MAXIMO_BASE = 15.0
MARGEM_PROGRESSO = 5.0


class _Faixa(NamedTuple):
    limite_inferior: float
    rotulo: str
    cor: str
    icone: str
    mensagem: str


# Da maior para a menor; a última não tem limite inferior.
FAIXAS: List[_Faixa] = [
    _Faixa(10.0, "Excepcional", "#D4AF37", "🏆", "Excelência reconhecida! Continue liderando!"),
    _Faixa(9.0, "Ótimo", "#DAC058", "🥇", "Excelente conduta! Você é referência!"),
    _Faixa(8.0, "Bom", "#4B5320", "🛡️", "Ótimo trabalho! Mantenha a disciplina."),
    _Faixa(6.0, "Regular", "#003366", "⚠️", "Atenção: melhore sua conduta para avançar."),
    _Faixa(-math.inf, "Insuficiente", "#8B0000", "🚨", "Urgente: corrija o comportamento para evitar sanções."),
]


def _validar_nota(nota) -> float:
    try:
        valor = float(nota)
    except (TypeError, ValueError) as erro:
        raise ErroValidacao(f"Nota inválida: {nota!r}") from erro
    if not math.isfinite(valor):
        raise ErroValidacao(f"Nota não finita: {nota!r}")
    return valor


def calcular_progresso(nota: float) -> float:
    """Percentual da barra: de -5 até max(15, nota + 5), limitado a [0, 100]."""
    valor = _validar_nota(nota)
    maximo = max(PROGRESSO_MAXIMO_BASE, valor + MARGEM_PROGRESSO)
    limitada = min(max(valor, PROGRESSO_MINIMO), maximo)
    percentual = (limitada - PROGRESSO_MINIMO) / (maximo - PROGRESSO_MINIMO) * 100
    return min(max(percentual, 0.0), 100.0)


def mapear_faixa(nota: float) -> FaixaNota:
    """Retorna a faixa de exibição da nota.

    Parâmetros:
    - nota (float): nota disciplinar, sem limites

    Retorno:
    - FaixaNota: rótulo, cor, ícone, percentual de progresso e mensagem

    Exceções:
    - ErroValidacao: nota não numérica, NaN ou infinita
    """
    valor = _validar_nota(nota)
    faixa = next(f for f in FAIXAS if valor >= f.limite_inferior)
    return FaixaNota(
        rotulo=faixa.rotulo,
        cor=faixa.cor,
        icone=faixa.icone,
        percentual_progresso=calcular_progresso(valor),
        mensagem=faixa.mensagem,
    )


def formatar_nota(nota: float) -> str:
    return f"{_validar_nota(nota):.2f}"
