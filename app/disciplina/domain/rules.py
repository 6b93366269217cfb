"""Tabelas de regras da nota disciplinar.

Responsabilidades:
- Valor de cada tipo de elogio
- Desconto de cada gravidade de termo
- Regras de acúmulo de anotações leves e médias
- Termo imediato de anotações graves e gravíssimas
- Rótulos exibidos no histórico

Consultas a chaves desconhecidas (dados legados ou malformados) valem zero
e nunca levantam exceção.
"""

from typing import List, NamedTuple, Optional

from disciplina.config.settings import Configuracoes
from disciplina.domain.records import GravidadeAnotacao, TermoAGerar, TipoElogio

VALORES_ELOGIO = {
    TipoElogio.COLETIVO.value: 0.20,
    TipoElogio.INDIVIDUAL.value: 0.40,
    TipoElogio.MENCAO_HONROSA.value: 0.60,
}

# Leves e médias não têm desconto fixo: só pesam ao acumular.
VALORES_TERMO = {
    GravidadeAnotacao.GRAVE.value: 0.50,
    GravidadeAnotacao.GRAVISSIMA.value: 1.00,
}

# Anotações graves e gravíssimas geram na hora um termo da mesma gravidade.
MOTIVOS_TERMO_DIRETO = {
    GravidadeAnotacao.GRAVE.value: "Anotação grave",
    GravidadeAnotacao.GRAVISSIMA.value: "Anotação gravíssima",
}

ROTULOS_ANOTACAO = {
    GravidadeAnotacao.LEVE.value: "Leve",
    GravidadeAnotacao.MEDIA.value: "Média",
    GravidadeAnotacao.GRAVE.value: "Grave",
    GravidadeAnotacao.GRAVISSIMA.value: "Gravíssima",
}

ROTULOS_ELOGIO = {
    TipoElogio.COLETIVO.value: "Coletivo",
    TipoElogio.INDIVIDUAL.value: "Individual",
    TipoElogio.MENCAO_HONROSA.value: "Menção Honrosa",
}

ROTULOS_TERMO = {
    GravidadeAnotacao.LEVE.value: "Leve",
    GravidadeAnotacao.MEDIA.value: "Médio",
    GravidadeAnotacao.GRAVE.value: "Grave",
    GravidadeAnotacao.GRAVISSIMA.value: "Gravíssimo",
}


class RegraAcumulo(NamedTuple):
    """A cada `limite` anotações de `gravidade_origem`, um termo de `gravidade_termo`."""

    gravidade_origem: GravidadeAnotacao
    limite: int
    gravidade_termo: GravidadeAnotacao
    motivo: str


def _chave(valor) -> str:
    return getattr(valor, "value", valor) if valor is not None else ""


def obter_bonus_elogio(tipo) -> float:
    """Bônus do tipo de elogio; 0.0 para tipos desconhecidos."""
    try:
        return float(VALORES_ELOGIO.get(_chave(tipo), 0.0))
    except (TypeError, ValueError):
        return 0.0


def obter_desconto_termo(gravidade) -> float:
    """Desconto da gravidade do termo; 0.0 para gravidades sem desconto fixo."""
    try:
        return float(VALORES_TERMO.get(_chave(gravidade), 0.0))
    except (TypeError, ValueError):
        return 0.0


def obter_regras_acumulo() -> List[RegraAcumulo]:
    """Monta as regras de acúmulo a partir dos limites configurados."""
    limite_leves = Configuracoes.LIMITE_ACUMULO_LEVES
    limite_medias = Configuracoes.LIMITE_ACUMULO_MEDIAS
    return [
        RegraAcumulo(
            gravidade_origem=GravidadeAnotacao.LEVE,
            limite=limite_leves,
            gravidade_termo=GravidadeAnotacao.GRAVE,
            motivo=f"{limite_leves} anotações leves acumuladas",
        ),
        RegraAcumulo(
            gravidade_origem=GravidadeAnotacao.MEDIA,
            limite=limite_medias,
            gravidade_termo=GravidadeAnotacao.GRAVISSIMA,
            motivo=f"{limite_medias} anotações médias acumuladas",
        ),
    ]


def obter_termo_direto(gravidade) -> Optional[TermoAGerar]:
    """Termo imediato da anotação, ou None para gravidades que só acumulam."""
    chave = _chave(gravidade)
    motivo = MOTIVOS_TERMO_DIRETO.get(chave)
    if motivo is None:
        return None
    return TermoAGerar(gravidade=chave, valor_desconto=obter_desconto_termo(chave), motivo=motivo)
