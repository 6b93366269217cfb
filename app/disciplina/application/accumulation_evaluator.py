"""Avaliador de acúmulo de anotações.

Responsabilidades:
- Contar anotações leves e médias do histórico anterior do aluno
- Decidir quais termos a nova anotação gera ao cruzar limites de acúmulo

Função pura: não lê nem grava no repositório. Quem chama persiste os
termos retornados.
"""

from typing import Iterable, List, Optional

from disciplina.domain.records import GravidadeAnotacao, TermoAGerar
from disciplina.domain.rules import obter_desconto_termo, obter_regras_acumulo


class AvaliadorAcumulo:
    """Aplica as regras de acúmulo sobre o histórico de anotações."""

    @staticmethod
    def avaliar(
        gravidade_nova,
        anotacoes_anteriores: Iterable,
        quantidade_nova: int = 1,
    ) -> List[TermoAGerar]:
        """Calcula os termos gerados pela nova anotação.

        O histórico deve ser o anterior à inserção: se a anotação nova já
        estiver nele, ela é contada duas vezes e os limites são antecipados.

        Parâmetros:
        - gravidade_nova (GravidadeAnotacao | str): gravidade da anotação lançada
        - anotacoes_anteriores (Iterable): gravidades, objetos Anotacao ou dicts
          com a chave "gravidade"; valores desconhecidos são ignorados
        - quantidade_nova (int): quantas anotações dessa gravidade entram de uma
          vez (1 no fluxo normal; mais quando há carga retroativa)

        Retorno:
        - list[TermoAGerar]: um termo por limite cruzado, vazio se nenhum
        """
        gravidade = AvaliadorAcumulo._normalizar(gravidade_nova)
        if gravidade is None or quantidade_nova <= 0:
            return []

        contagem = AvaliadorAcumulo._contar(anotacoes_anteriores)
        termos = []

        for regra in obter_regras_acumulo():
            if regra.gravidade_origem != gravidade or regra.limite <= 0:
                continue

            anterior = contagem.get(gravidade, 0)
            atual = anterior + quantidade_nova
            cruzamentos = atual // regra.limite - anterior // regra.limite

            for _ in range(cruzamentos):
                termos.append(
                    TermoAGerar(
                        gravidade=regra.gravidade_termo,
                        valor_desconto=obter_desconto_termo(regra.gravidade_termo),
                        motivo=regra.motivo,
                    )
                )

        return termos

    @staticmethod
    def _contar(anotacoes: Iterable) -> dict:
        contagem = {}
        for anotacao in anotacoes or []:
            gravidade = AvaliadorAcumulo._normalizar(anotacao)
            if gravidade is not None:
                contagem[gravidade] = contagem.get(gravidade, 0) + 1
        return contagem

    @staticmethod
    def _normalizar(valor) -> Optional[GravidadeAnotacao]:
        """Extrai a gravidade de um enum, string, dict ou objeto Anotacao."""
        if isinstance(valor, dict):
            valor = valor.get("gravidade")
        elif not isinstance(valor, (str, GravidadeAnotacao)) and hasattr(valor, "gravidade"):
            valor = valor.gravidade

        if isinstance(valor, GravidadeAnotacao):
            return valor
        try:
            return GravidadeAnotacao(str(valor).strip().lower())
        except ValueError:
            return None


def avaliar_acumulo(gravidade_nova, anotacoes_anteriores: Iterable, quantidade_nova: int = 1) -> List[TermoAGerar]:
    """Atalho funcional para AvaliadorAcumulo.avaliar."""
    return AvaliadorAcumulo.avaliar(gravidade_nova, anotacoes_anteriores, quantidade_nova)
