"""Controlador de turmas e relatórios da API.

Responsabilidades:
- Expor a operação em lote sobre uma turma
- Expor relatórios de turma e estatísticas gerais
"""

from fastapi import APIRouter, Depends

from disciplina.api.dependencies import (
    ERROS_MAPEADOS,
    exigir_ator_privilegiado,
    obter_repositorio_api,
    traduzir_erro,
)
from disciplina.api.record_controller import obter_servico_registro
from disciplina.application.record_service import ServicoRegistro
from disciplina.application.report_service import ServicoRelatorio
from disciplina.domain.records import OperacaoLote
from disciplina.domain.student import Ator


def obter_servico_relatorio(repositorio=Depends(obter_repositorio_api)) -> ServicoRelatorio:
    """Dependência para obter o serviço de relatórios."""
    return ServicoRelatorio(repositorio)


class ControladorTurmas:
    """Controlador de operações por turma.

    Responsabilidades:
    - Registrar rota de lançamento em lote
    - Registrar rotas de relatório
    """

    def __init__(self):
        self.roteador = APIRouter()
        self.roteador.add_api_route(
            "/turmas/{turma_id}/lote",
            self._aplicar_em_lote,
            methods=["POST"],
            response_model=dict,
            summary="Aplica anotação ou elogio a todos os alunos ativos da turma",
        )
        self.roteador.add_api_route(
            "/turmas/{turma_id}/relatorio",
            self._gerar_relatorio_turma,
            methods=["GET"],
            response_model=dict,
        )
        self.roteador.add_api_route(
            "/relatorios/estatisticas",
            self._gerar_estatisticas,
            methods=["GET"],
            response_model=dict,
        )

    @staticmethod
    def _aplicar_em_lote(
        turma_id: str,
        operacao: OperacaoLote,
        ator: Ator = Depends(exigir_ator_privilegiado),
        servico: ServicoRegistro = Depends(obter_servico_registro),
    ):
        """Executa a operação em lote.

        Falhas individuais não interrompem o lote e aparecem no resumo com a
        etapa em que ocorreram.

        Retorno:
        - dict: total, sucessos, falhas e resultado por aluno
        """
        try:
            return servico.aplicar_em_lote(turma_id, operacao, ator).model_dump(mode="json")
        except ERROS_MAPEADOS as erro:
            raise traduzir_erro(erro)

    @staticmethod
    def _gerar_relatorio_turma(turma_id: str, servico: ServicoRelatorio = Depends(obter_servico_relatorio)):
        try:
            return servico.gerar_relatorio_turma(turma_id)
        except ERROS_MAPEADOS as erro:
            raise traduzir_erro(erro)

    @staticmethod
    def _gerar_estatisticas(servico: ServicoRelatorio = Depends(obter_servico_relatorio)):
        try:
            return servico.gerar_estatisticas_gerais()
        except ERROS_MAPEADOS as erro:
            raise traduzir_erro(erro)
