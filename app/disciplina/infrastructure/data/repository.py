"""Contrato de persistência dos registros disciplinares.

Responsabilidades:
- Declarar as operações de leitura e escrita que o domínio exige
- Declarar o incremento atômico da nota, único caminho de escrita da nota
"""

from abc import ABC, abstractmethod
from typing import List, Optional

from disciplina.domain.records import (
    Anotacao,
    CategoriaHistorico,
    Elogio,
    Falta,
    RegistroDisciplinar,
    Termo,
)
from disciplina.domain.student import Aluno, Turma


class RepositorioDisciplinar(ABC):
    """Porta de armazenamento usada pelos serviços de aplicação.

    Implementações atribuem `id` e `criado_em` nas inserções e devolvem o
    registro persistido.
    """

    # --- Turmas e alunos ----------------------------------------------------

    @abstractmethod
    def inserir_turma(self, turma: Turma) -> Turma:
        ...

    @abstractmethod
    def obter_turma(self, turma_id: str) -> Optional[Turma]:
        ...

    @abstractmethod
    def listar_turmas(self) -> List[Turma]:
        ...

    @abstractmethod
    def inserir_aluno(self, aluno: Aluno) -> Aluno:
        ...

    @abstractmethod
    def obter_aluno(self, aluno_id: str) -> Optional[Aluno]:
        ...

    @abstractmethod
    def listar_alunos(self, turma_id: Optional[str] = None, incluir_arquivados: bool = False) -> List[Aluno]:
        """Lista alunos, opcionalmente filtrando pela turma, ordenados por nome."""

    @abstractmethod
    def atualizar_aluno(
        self, aluno_id: str, turma_id: Optional[str] = None, arquivado: Optional[bool] = None
    ) -> Optional[Aluno]:
        """Altera a turma e/ou o arquivamento do aluno. `None` mantém o valor.

        A nota não passa por aqui.

        Retorno:
        - Aluno | None: aluno atualizado, ou None se não existe
        """

    @abstractmethod
    def incrementar_nota(self, aluno_id: str, delta: float) -> float:
        """Soma `delta` à nota do aluno numa única operação atômica.

        Parâmetros:
        - aluno_id (str): aluno alvo
        - delta (float): valor assinado a somar

        Retorno:
        - float: nota após o incremento

        Exceções:
        - ErroNaoEncontrado: quando o aluno não existe
        """

    # --- Registros ----------------------------------------------------------

    @abstractmethod
    def inserir_anotacao(self, anotacao: Anotacao) -> Anotacao:
        ...

    @abstractmethod
    def inserir_elogio(self, elogio: Elogio) -> Elogio:
        ...

    @abstractmethod
    def inserir_termo(self, termo: Termo) -> Termo:
        ...

    @abstractmethod
    def inserir_falta(self, falta: Falta) -> Falta:
        ...

    @abstractmethod
    def listar_anotacoes(self, aluno_id: str) -> List[Anotacao]:
        ...

    @abstractmethod
    def listar_elogios(self, aluno_id: str) -> List[Elogio]:
        ...

    @abstractmethod
    def listar_termos(self, aluno_id: str) -> List[Termo]:
        ...

    @abstractmethod
    def listar_faltas(self, aluno_id: str) -> List[Falta]:
        ...

    @abstractmethod
    def excluir_registro(self, categoria: CategoriaHistorico, registro_id: str) -> Optional[RegistroDisciplinar]:
        """Exclui o registro e devolve o conteúdo que estava gravado.

        Retorno:
        - RegistroDisciplinar | None: registro excluído, ou None se não existia
        """
