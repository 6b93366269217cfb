"""Controlador de cadastro de turmas e alunos da API.

Responsabilidades:
- Criar e listar turmas
- Cadastrar e listar alunos
- Mudar aluno de turma e (des)arquivar
"""

from typing import Optional

from fastapi import APIRouter, Depends

from disciplina.api.dependencies import (
    ERROS_MAPEADOS,
    exigir_ator_privilegiado,
    obter_repositorio_api,
    traduzir_erro,
)
from disciplina.application.enrollment_service import ServicoCadastro
from disciplina.domain.student import Ator, EntradaAluno, EntradaAtualizacaoAluno, EntradaTurma


def obter_servico_cadastro(repositorio=Depends(obter_repositorio_api)) -> ServicoCadastro:
    """Dependência para obter o serviço de cadastro."""
    return ServicoCadastro(repositorio)


class ControladorCadastro:
    """Controlador de cadastro.

    Responsabilidades:
    - Registrar rotas de turmas e alunos
    - Exigir ator privilegiado nas rotas de escrita
    """

    def __init__(self):
        self.roteador = APIRouter()
        self.roteador.add_api_route(
            "/turmas",
            self._criar_turma,
            methods=["POST"],
            response_model=dict,
            status_code=201,
        )
        self.roteador.add_api_route("/turmas", self._listar_turmas, methods=["GET"], response_model=list)
        self.roteador.add_api_route(
            "/alunos",
            self._criar_aluno,
            methods=["POST"],
            response_model=dict,
            status_code=201,
            summary="Cadastra aluno com a nota inicial padrão",
        )
        self.roteador.add_api_route("/alunos", self._listar_alunos, methods=["GET"], response_model=list)
        self.roteador.add_api_route(
            "/alunos/{aluno_id}",
            self._atualizar_aluno,
            methods=["PATCH"],
            response_model=dict,
            summary="Muda o aluno de turma e/ou arquiva",
        )

    @staticmethod
    def _criar_turma(
        entrada: EntradaTurma,
        ator: Ator = Depends(exigir_ator_privilegiado),
        servico: ServicoCadastro = Depends(obter_servico_cadastro),
    ):
        try:
            return servico.criar_turma(entrada.nome, entrada.ano_letivo).model_dump(mode="json")
        except ERROS_MAPEADOS as erro:
            raise traduzir_erro(erro)

    @staticmethod
    def _listar_turmas(servico: ServicoCadastro = Depends(obter_servico_cadastro)):
        try:
            return [turma.model_dump(mode="json") for turma in servico.listar_turmas()]
        except ERROS_MAPEADOS as erro:
            raise traduzir_erro(erro)

    @staticmethod
    def _criar_aluno(
        entrada: EntradaAluno,
        ator: Ator = Depends(exigir_ator_privilegiado),
        servico: ServicoCadastro = Depends(obter_servico_cadastro),
    ):
        """Cadastra um aluno.

        Retorno:
        - dict: aluno criado, com id e nota inicial

        Exceções:
        - HTTPException: 400 (matrícula repetida), 404 (turma inexistente) ou 503
        """
        try:
            aluno = servico.criar_aluno(entrada.nome, entrada.matricula, entrada.turma_id, entrada.nota_inicial)
            return aluno.model_dump(mode="json")
        except ERROS_MAPEADOS as erro:
            raise traduzir_erro(erro)

    @staticmethod
    def _listar_alunos(
        turma_id: Optional[str] = None,
        incluir_arquivados: bool = False,
        servico: ServicoCadastro = Depends(obter_servico_cadastro),
    ):
        try:
            return [aluno.model_dump(mode="json") for aluno in servico.listar_alunos(turma_id, incluir_arquivados)]
        except ERROS_MAPEADOS as erro:
            raise traduzir_erro(erro)

    @staticmethod
    def _atualizar_aluno(
        aluno_id: str,
        entrada: EntradaAtualizacaoAluno,
        ator: Ator = Depends(exigir_ator_privilegiado),
        servico: ServicoCadastro = Depends(obter_servico_cadastro),
    ):
        try:
            return servico.atualizar_aluno(aluno_id, entrada.turma_id, entrada.arquivado).model_dump(mode="json")
        except ERROS_MAPEADOS as erro:
            raise traduzir_erro(erro)
