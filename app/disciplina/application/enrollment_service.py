"""Serviço de cadastro de turmas e alunos.

Responsabilidades:
- Criar turmas e alunos (nota inicial padrão quando não informada)
- Mudar o aluno de turma
- Arquivar e desarquivar alunos
"""

from typing import List, Optional

from pydantic import ValidationError

from disciplina.config.settings import Configuracoes
from disciplina.domain.errors import ErroDisciplinar, ErroNaoEncontrado, ErroPersistencia, ErroValidacao
from disciplina.domain.student import Aluno, EntradaAluno, EntradaAtualizacaoAluno, EntradaTurma, Turma
from disciplina.infrastructure.data.repository import RepositorioDisciplinar
from disciplina.util.logger import FabricaLogger

logger = FabricaLogger.obter("cadastro")


class ServicoCadastro:
    """Cadastro de turmas e alunos sobre o repositório.

    A nota do aluno só é definida na criação; depois disso muda apenas pelos
    lançamentos.
    """

    def __init__(self, repositorio: RepositorioDisciplinar):
        self.repositorio = repositorio

    def criar_turma(self, nome: str, ano_letivo: int) -> Turma:
        entrada = self._validar(EntradaTurma, nome=nome, ano_letivo=ano_letivo)
        turma = self._persistir(
            lambda: self.repositorio.inserir_turma(Turma(nome=entrada.nome, ano_letivo=entrada.ano_letivo)),
            "a turma",
        )
        logger.info(f"Turma {turma.nome} ({turma.ano_letivo}) criada com id {turma.id}.")
        return turma

    def listar_turmas(self) -> List[Turma]:
        return self.repositorio.listar_turmas()

    def criar_aluno(
        self,
        nome: str,
        matricula: Optional[str] = None,
        turma_id: Optional[str] = None,
        nota_inicial: Optional[float] = None,
    ) -> Aluno:
        """Cadastra um aluno ativo.

        Exceções:
        - ErroValidacao: dados inválidos ou matrícula já usada
        - ErroNaoEncontrado: turma informada não existe
        - ErroPersistencia: falha ao gravar
        """
        entrada = self._validar(
            EntradaAluno, nome=nome, matricula=matricula, turma_id=turma_id, nota_inicial=nota_inicial
        )
        if entrada.turma_id is not None:
            self._obter_turma(entrada.turma_id)
        if entrada.matricula is not None and self._matricula_em_uso(entrada.matricula):
            raise ErroValidacao(f"Matrícula {entrada.matricula} já cadastrada.")

        nota = Configuracoes.NOTA_INICIAL_PADRAO if entrada.nota_inicial is None else entrada.nota_inicial
        aluno = self._persistir(
            lambda: self.repositorio.inserir_aluno(
                Aluno(
                    nome=entrada.nome,
                    matricula=entrada.matricula,
                    turma_id=entrada.turma_id,
                    nota_disciplinar=nota,
                )
            ),
            "o aluno",
        )
        logger.info(f"Aluno {aluno.id} cadastrado com nota inicial {nota:.2f}.")
        return aluno

    def listar_alunos(self, turma_id: Optional[str] = None, incluir_arquivados: bool = False) -> List[Aluno]:
        return self.repositorio.listar_alunos(turma_id=turma_id, incluir_arquivados=incluir_arquivados)

    def atualizar_aluno(
        self, aluno_id: str, turma_id: Optional[str] = None, arquivado: Optional[bool] = None
    ) -> Aluno:
        """Muda a turma e/ou o arquivamento do aluno.

        Exceções:
        - ErroValidacao: nenhuma alteração informada, ou aluno já está na turma
        - ErroNaoEncontrado: aluno ou turma de destino inexistente
        """
        entrada = self._validar(EntradaAtualizacaoAluno, turma_id=turma_id, arquivado=arquivado)
        aluno = self.repositorio.obter_aluno(aluno_id)
        if aluno is None:
            raise ErroNaoEncontrado(f"Aluno {aluno_id} não encontrado.", aluno_id=aluno_id)

        if entrada.turma_id is not None:
            if entrada.turma_id == aluno.turma_id:
                raise ErroValidacao("Aluno já está nesta turma.", aluno_id=aluno_id)
            self._obter_turma(entrada.turma_id)

        atualizado = self._persistir(
            lambda: self.repositorio.atualizar_aluno(aluno_id, turma_id=entrada.turma_id, arquivado=entrada.arquivado),
            "o cadastro do aluno",
            aluno_id=aluno_id,
        )
        if atualizado is None:
            raise ErroNaoEncontrado(f"Aluno {aluno_id} não encontrado.", aluno_id=aluno_id)

        if entrada.turma_id is not None:
            logger.info(f"Aluno {aluno_id} transferido da turma {aluno.turma_id} para {entrada.turma_id}.")
        if entrada.arquivado is not None:
            logger.info(f"Aluno {aluno_id} {'arquivado' if entrada.arquivado else 'reativado'}.")
        return atualizado

    def _obter_turma(self, turma_id: str) -> Turma:
        turma = self.repositorio.obter_turma(turma_id)
        if turma is None:
            raise ErroNaoEncontrado(f"Turma {turma_id} não encontrada.")
        return turma

    def _matricula_em_uso(self, matricula: str) -> bool:
        return any(a.matricula == matricula for a in self.repositorio.listar_alunos(incluir_arquivados=True))

    @staticmethod
    def _validar(modelo, **campos):
        try:
            return modelo(**campos)
        except ValidationError as erro:
            mensagem = "; ".join(str(detalhe.get("msg")) for detalhe in erro.errors())
            raise ErroValidacao(mensagem) from erro

    @staticmethod
    def _persistir(operacao, descricao: str, aluno_id: Optional[str] = None):
        try:
            return operacao()
        except ErroDisciplinar:
            raise
        except Exception as erro:
            logger.error(f"Falha ao gravar {descricao}: {erro}")
            raise ErroPersistencia(f"Não foi possível gravar {descricao}.", aluno_id=aluno_id) from erro
