"""Fixtures compartilhadas para os testes."""

import sys
from pathlib import Path

import pytest

RAIZ = Path(__file__).resolve().parents[2]
DIRETORIO_APP = RAIZ / "app"
if str(DIRETORIO_APP) not in sys.path:
    sys.path.insert(0, str(DIRETORIO_APP))

from disciplina.domain.student import Aluno, Turma  # noqa: E402
from disciplina.infrastructure.data.memory_repository import RepositorioMemoria  # noqa: E402


@pytest.fixture()
def repositorio():
    """Retorna um repositório em memória vazio."""
    return RepositorioMemoria()


@pytest.fixture()
def turma(repositorio):
    """Turma de 2024 já gravada."""
    return repositorio.inserir_turma(Turma(nome="1º Ano A", ano_letivo=2024))


@pytest.fixture()
def aluno(repositorio, turma):
    """Aluno matriculado na turma com a nota inicial padrão (8.00)."""
    return repositorio.inserir_aluno(
        Aluno(nome="Ana Souza", matricula="2024001", turma_id=turma.id, nota_disciplinar=8.0)
    )


@pytest.fixture()
def alunos_turma(repositorio, turma, aluno):
    """Três alunos ativos e um arquivado na mesma turma."""
    outros = [
        repositorio.inserir_aluno(Aluno(nome="Bruno Lima", turma_id=turma.id, nota_disciplinar=9.5)),
        repositorio.inserir_aluno(Aluno(nome="Carla Dias", turma_id=turma.id, nota_disciplinar=5.0)),
    ]
    repositorio.inserir_aluno(Aluno(nome="Diego Arquivado", turma_id=turma.id, arquivado=True))
    return [aluno] + outros
