"""Controlador de registros disciplinares da API.

Responsabilidades:
- Definir rotas de lançamento (anotação, elogio, falta)
- Definir rotas de exclusão e consulta do histórico
- Traduzir erros em respostas HTTP
"""

from typing import Optional

from fastapi import APIRouter, Depends

from disciplina.api.dependencies import (
    ERROS_MAPEADOS,
    exigir_ator_privilegiado,
    obter_repositorio_api,
    traduzir_erro,
)
from disciplina.application.history_service import ServicoHistorico
from disciplina.application.record_service import ServicoRegistro
from disciplina.domain.records import EntradaAnotacao, EntradaElogio, EntradaFalta
from disciplina.domain.student import Ator


def obter_servico_registro(repositorio=Depends(obter_repositorio_api)) -> ServicoRegistro:
    """Dependência para obter o serviço de registros sobre o repositório em uso."""
    return ServicoRegistro(repositorio)


def obter_servico_historico(repositorio=Depends(obter_repositorio_api)) -> ServicoHistorico:
    return ServicoHistorico(repositorio)


class ControladorRegistros:
    """Controlador de registros por aluno.

    Responsabilidades:
    - Registrar rotas de lançamento, exclusão e consulta
    - Exigir ator privilegiado nas rotas de escrita
    """

    def __init__(self):
        """Inicializa o controlador.

        Responsabilidades:
        - Instanciar o roteador
        - Registrar as rotas disponíveis
        """
        self.roteador = APIRouter()
        self._registrar_rotas()

    def _registrar_rotas(self):
        self.roteador.add_api_route(
            path="/alunos/{aluno_id}/anotacoes",
            endpoint=self._registrar_anotacao,
            methods=["POST"],
            response_model=dict,
            status_code=201,
            summary="Lança anotação e aplica termos por acúmulo",
        )
        self.roteador.add_api_route(
            path="/alunos/{aluno_id}/elogios",
            endpoint=self._registrar_elogio,
            methods=["POST"],
            response_model=dict,
            status_code=201,
        )
        self.roteador.add_api_route(
            path="/alunos/{aluno_id}/faltas",
            endpoint=self._registrar_falta,
            methods=["POST"],
            response_model=dict,
            status_code=201,
        )
        self.roteador.add_api_route(
            path="/historico/{categoria}/{registro_id}",
            endpoint=self._excluir_item,
            methods=["DELETE"],
            response_model=dict,
            summary="Exclui item do histórico e reverte seu valor na nota",
        )
        self.roteador.add_api_route(
            path="/alunos/{aluno_id}/historico",
            endpoint=self._obter_historico,
            methods=["GET"],
            response_model=dict,
        )
        self.roteador.add_api_route(
            path="/alunos/{aluno_id}/nota",
            endpoint=self._obter_nota,
            methods=["GET"],
            response_model=dict,
        )

    @staticmethod
    def _registrar_anotacao(
        aluno_id: str,
        entrada: EntradaAnotacao,
        ator: Ator = Depends(exigir_ator_privilegiado),
        servico: ServicoRegistro = Depends(obter_servico_registro),
    ):
        """Lança uma anotação.

        Retorno:
        - dict: anotação, termos gerados, delta aplicado e nota atual

        Exceções:
        - HTTPException: 400, 404, 409 (nota dessincronizada) ou 503
        """
        try:
            return servico.registrar_anotacao(aluno_id, entrada.gravidade, entrada.descricao, ator).model_dump(
                mode="json"
            )
        except ERROS_MAPEADOS as erro:
            raise traduzir_erro(erro)

    @staticmethod
    def _registrar_elogio(
        aluno_id: str,
        entrada: EntradaElogio,
        ator: Ator = Depends(exigir_ator_privilegiado),
        servico: ServicoRegistro = Depends(obter_servico_registro),
    ):
        try:
            return servico.registrar_elogio(aluno_id, entrada.tipo, entrada.descricao, ator).model_dump(mode="json")
        except ERROS_MAPEADOS as erro:
            raise traduzir_erro(erro)

    @staticmethod
    def _registrar_falta(
        aluno_id: str,
        entrada: EntradaFalta,
        ator: Ator = Depends(exigir_ator_privilegiado),
        servico: ServicoRegistro = Depends(obter_servico_registro),
    ):
        try:
            resultado = servico.registrar_falta(
                aluno_id, entrada.data_inicio, entrada.data_fim, entrada.motivo, entrada.detalhes, ator
            )
            return resultado.model_dump(mode="json")
        except ERROS_MAPEADOS as erro:
            raise traduzir_erro(erro)

    @staticmethod
    def _excluir_item(
        categoria: str,
        registro_id: str,
        ator: Ator = Depends(exigir_ator_privilegiado),
        servico: ServicoRegistro = Depends(obter_servico_registro),
    ):
        """Exclui um item do histórico.

        Elogios e termos revertem o valor gravado; anotações e faltas não
        alteram a nota.
        """
        try:
            return servico.excluir_item_historico(categoria, registro_id).model_dump(mode="json")
        except ERROS_MAPEADOS as erro:
            raise traduzir_erro(erro)

    @staticmethod
    def _obter_historico(
        aluno_id: str,
        ano_letivo: Optional[int] = None,
        servico: ServicoHistorico = Depends(obter_servico_historico),
    ):
        try:
            return servico.obter_historico(aluno_id, ano_letivo).model_dump(mode="json")
        except ERROS_MAPEADOS as erro:
            raise traduzir_erro(erro)

    @staticmethod
    def _obter_nota(aluno_id: str, servico: ServicoHistorico = Depends(obter_servico_historico)):
        try:
            return servico.obter_nota(aluno_id)
        except ERROS_MAPEADOS as erro:
            raise traduzir_erro(erro)
