"""Repositório em memória.

Responsabilidades:
- Manter turmas, alunos e registros em dicionários
- Serializar todas as operações com um lock (incremento de nota atômico)
"""

import threading
import uuid
from datetime import datetime, timedelta
from typing import Dict, List, Optional

from disciplina.domain.errors import ErroNaoEncontrado
from disciplina.domain.records import (
    Anotacao,
    CategoriaHistorico,
    Elogio,
    Falta,
    RegistroDisciplinar,
    Termo,
)
from disciplina.domain.student import Aluno, Turma
from disciplina.infrastructure.data.repository import RepositorioDisciplinar


class RepositorioMemoria(RepositorioDisciplinar):
    """Implementação thread-safe em memória.

    Os objetos guardados nunca são devolvidos diretamente: leituras e
    inserções retornam cópias, de modo que alterar o retorno não muda o estado.
    """

    def __init__(self):
        self._lock = threading.RLock()
        self._ultimo_criado_em = datetime.min
        self._turmas: Dict[str, Turma] = {}
        self._alunos: Dict[str, Aluno] = {}
        self._registros: Dict[CategoriaHistorico, Dict[str, RegistroDisciplinar]] = {
            categoria: {} for categoria in CategoriaHistorico
        }

    @staticmethod
    def _novo_id() -> str:
        return str(uuid.uuid4())

    def _carimbo(self) -> datetime:
        """Instante de criação estritamente crescente entre inserções."""
        agora = datetime.now()
        if agora <= self._ultimo_criado_em:
            agora = self._ultimo_criado_em + timedelta(microseconds=1)
        self._ultimo_criado_em = agora
        return agora

    def _inserir(self, categoria: CategoriaHistorico, registro):
        with self._lock:
            novo = registro.model_copy(
                update={"id": registro.id or self._novo_id(), "criado_em": registro.criado_em or self._carimbo()}
            )
            self._registros[categoria][novo.id] = novo
            return novo.model_copy()

    def _listar(self, categoria: CategoriaHistorico, aluno_id: str) -> list:
        with self._lock:
            return [r.model_copy() for r in self._registros[categoria].values() if r.aluno_id == aluno_id]

    # --- Turmas e alunos ----------------------------------------------------

    def inserir_turma(self, turma: Turma) -> Turma:
        with self._lock:
            nova = turma.model_copy(update={"id": turma.id or self._novo_id()})
            self._turmas[nova.id] = nova
            return nova.model_copy()

    def obter_turma(self, turma_id: str) -> Optional[Turma]:
        with self._lock:
            turma = self._turmas.get(turma_id)
            return turma.model_copy() if turma else None

    def listar_turmas(self) -> List[Turma]:
        with self._lock:
            return sorted((t.model_copy() for t in self._turmas.values()), key=lambda t: t.nome)

    def inserir_aluno(self, aluno: Aluno) -> Aluno:
        with self._lock:
            novo = aluno.model_copy(update={"id": aluno.id or self._novo_id()})
            self._alunos[novo.id] = novo
            return novo.model_copy()

    def obter_aluno(self, aluno_id: str) -> Optional[Aluno]:
        with self._lock:
            aluno = self._alunos.get(aluno_id)
            return aluno.model_copy() if aluno else None

    def listar_alunos(self, turma_id: Optional[str] = None, incluir_arquivados: bool = False) -> List[Aluno]:
        with self._lock:
            alunos = [
                a.model_copy()
                for a in self._alunos.values()
                if (turma_id is None or a.turma_id == turma_id) and (incluir_arquivados or not a.arquivado)
            ]
        return sorted(alunos, key=lambda a: a.nome)

    def atualizar_aluno(
        self, aluno_id: str, turma_id: Optional[str] = None, arquivado: Optional[bool] = None
    ) -> Optional[Aluno]:
        with self._lock:
            aluno = self._alunos.get(aluno_id)
            if aluno is None:
                return None
            campos = {}
            if turma_id is not None:
                campos["turma_id"] = turma_id
            if arquivado is not None:
                campos["arquivado"] = arquivado
            self._alunos[aluno_id] = aluno.model_copy(update=campos)
            return self._alunos[aluno_id].model_copy()

    def incrementar_nota(self, aluno_id: str, delta: float) -> float:
        with self._lock:
            aluno = self._alunos.get(aluno_id)
            if aluno is None:
                raise ErroNaoEncontrado(f"Aluno {aluno_id} não encontrado.", aluno_id=aluno_id, etapa="nota")
            nova_nota = aluno.nota_disciplinar + float(delta)
            self._alunos[aluno_id] = aluno.model_copy(update={"nota_disciplinar": nova_nota})
            return nova_nota

    # --- Registros ----------------------------------------------------------

    def inserir_anotacao(self, anotacao: Anotacao) -> Anotacao:
        return self._inserir(CategoriaHistorico.ANOTACAO, anotacao)

    def inserir_elogio(self, elogio: Elogio) -> Elogio:
        return self._inserir(CategoriaHistorico.ELOGIO, elogio)

    def inserir_termo(self, termo: Termo) -> Termo:
        return self._inserir(CategoriaHistorico.TERMO, termo)

    def inserir_falta(self, falta: Falta) -> Falta:
        return self._inserir(CategoriaHistorico.FALTA, falta)

    def listar_anotacoes(self, aluno_id: str) -> List[Anotacao]:
        return self._listar(CategoriaHistorico.ANOTACAO, aluno_id)

    def listar_elogios(self, aluno_id: str) -> List[Elogio]:
        return self._listar(CategoriaHistorico.ELOGIO, aluno_id)

    def listar_termos(self, aluno_id: str) -> List[Termo]:
        return self._listar(CategoriaHistorico.TERMO, aluno_id)

    def listar_faltas(self, aluno_id: str) -> List[Falta]:
        return self._listar(CategoriaHistorico.FALTA, aluno_id)

    def excluir_registro(self, categoria: CategoriaHistorico, registro_id: str) -> Optional[RegistroDisciplinar]:
        with self._lock:
            return self._registros[CategoriaHistorico(categoria)].pop(registro_id, None)
