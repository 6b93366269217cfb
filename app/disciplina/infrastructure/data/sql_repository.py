"""Repositório relacional via SQLAlchemy.

Responsabilidades:
- Criar o engine e as tabelas a partir da DATABASE_URL
- Converter linhas ORM em modelos de domínio
- Incrementar a nota com um único UPDATE aritmético
"""

import os
from enum import Enum
from typing import List, Optional

from sqlalchemy import create_engine, select, update
from sqlalchemy.engine import make_url
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

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
from disciplina.infrastructure.data.sql_models import (
    AlunoModel,
    AnotacaoModel,
    Base,
    ElogioModel,
    FaltaModel,
    TermoModel,
    TurmaModel,
)
from disciplina.util.logger import FabricaLogger

logger = FabricaLogger.obter("sql")

_MAPEAMENTO = {
    CategoriaHistorico.ANOTACAO: (AnotacaoModel, Anotacao),
    CategoriaHistorico.ELOGIO: (ElogioModel, Elogio),
    CategoriaHistorico.TERMO: (TermoModel, Termo),
    CategoriaHistorico.FALTA: (FaltaModel, Falta),
}


def criar_engine(database_url: str, echo: bool = False):
    """Cria o engine, preparando o diretório de bancos SQLite em arquivo.

    Parâmetros:
    - database_url (str): URL SQLAlchemy
    - echo (bool): loga SQL emitido

    Retorno:
    - Engine: engine configurado
    """
    url = make_url(database_url)
    kwargs = {"echo": echo}

    if url.get_backend_name() == "sqlite":
        kwargs["connect_args"] = {"check_same_thread": False}
        if url.database in (None, "", ":memory:"):
            # Banco em memória: todas as sessões precisam da mesma conexão.
            kwargs["poolclass"] = StaticPool
        else:
            diretorio = os.path.dirname(os.path.abspath(url.database))
            os.makedirs(diretorio, exist_ok=True)

    return create_engine(url, **kwargs)


class RepositorioSql(RepositorioDisciplinar):
    """Implementação relacional do repositório disciplinar."""

    def __init__(self, database_url: str, echo: bool = False):
        self.engine = criar_engine(database_url, echo=echo)
        self._fabrica_sessao = sessionmaker(bind=self.engine, expire_on_commit=False)
        Base.metadata.create_all(self.engine)
        logger.info(f"Repositório SQL pronto ({self.engine.url.get_backend_name()}).")

    @staticmethod
    def _para_colunas(modelo) -> dict:
        dados = modelo.model_dump(exclude_none=True)
        return {chave: (valor.value if isinstance(valor, Enum) else valor) for chave, valor in dados.items()}

    def _inserir(self, categoria: CategoriaHistorico, registro):
        classe_orm, classe_dominio = _MAPEAMENTO[categoria]
        with self._fabrica_sessao.begin() as sessao:
            linha = classe_orm(**self._para_colunas(registro))
            sessao.add(linha)
            sessao.flush()
            return classe_dominio.model_validate(linha)

    def _listar(self, categoria: CategoriaHistorico, aluno_id: str) -> list:
        classe_orm, classe_dominio = _MAPEAMENTO[categoria]
        with self._fabrica_sessao() as sessao:
            linhas = sessao.scalars(
                select(classe_orm).where(classe_orm.aluno_id == aluno_id).order_by(classe_orm.criado_em)
            ).all()
            return [classe_dominio.model_validate(linha) for linha in linhas]

    # --- Turmas e alunos ----------------------------------------------------

    def inserir_turma(self, turma: Turma) -> Turma:
        with self._fabrica_sessao.begin() as sessao:
            linha = TurmaModel(**self._para_colunas(turma))
            sessao.add(linha)
            sessao.flush()
            return Turma.model_validate(linha)

    def obter_turma(self, turma_id: str) -> Optional[Turma]:
        with self._fabrica_sessao() as sessao:
            linha = sessao.get(TurmaModel, turma_id)
            return Turma.model_validate(linha) if linha else None

    def listar_turmas(self) -> List[Turma]:
        with self._fabrica_sessao() as sessao:
            linhas = sessao.scalars(select(TurmaModel).order_by(TurmaModel.nome)).all()
            return [Turma.model_validate(linha) for linha in linhas]

    def inserir_aluno(self, aluno: Aluno) -> Aluno:
        with self._fabrica_sessao.begin() as sessao:
            linha = AlunoModel(**self._para_colunas(aluno))
            sessao.add(linha)
            sessao.flush()
            return Aluno.model_validate(linha)

    def obter_aluno(self, aluno_id: str) -> Optional[Aluno]:
        with self._fabrica_sessao() as sessao:
            linha = sessao.get(AlunoModel, aluno_id)
            return Aluno.model_validate(linha) if linha else None

    def listar_alunos(self, turma_id: Optional[str] = None, incluir_arquivados: bool = False) -> List[Aluno]:
        consulta = select(AlunoModel)
        if turma_id is not None:
            consulta = consulta.where(AlunoModel.turma_id == turma_id)
        if not incluir_arquivados:
            consulta = consulta.where(AlunoModel.arquivado.is_(False))
        with self._fabrica_sessao() as sessao:
            linhas = sessao.scalars(consulta.order_by(AlunoModel.nome)).all()
            return [Aluno.model_validate(linha) for linha in linhas]

    def atualizar_aluno(
        self, aluno_id: str, turma_id: Optional[str] = None, arquivado: Optional[bool] = None
    ) -> Optional[Aluno]:
        with self._fabrica_sessao.begin() as sessao:
            linha = sessao.get(AlunoModel, aluno_id)
            if linha is None:
                return None
            if turma_id is not None:
                linha.turma_id = turma_id
            if arquivado is not None:
                linha.arquivado = arquivado
            sessao.flush()
            return Aluno.model_validate(linha)

    def incrementar_nota(self, aluno_id: str, delta: float) -> float:
        with self._fabrica_sessao.begin() as sessao:
            resultado = sessao.execute(
                update(AlunoModel)
                .where(AlunoModel.id == aluno_id)
                .values(nota_disciplinar=AlunoModel.nota_disciplinar + float(delta))
                .execution_options(synchronize_session=False)
            )
            if resultado.rowcount == 0:
                raise ErroNaoEncontrado(f"Aluno {aluno_id} não encontrado.", aluno_id=aluno_id, etapa="nota")
            # Mesma transação: a linha continua travada até o commit.
            nova_nota = sessao.execute(
                select(AlunoModel.nota_disciplinar).where(AlunoModel.id == aluno_id)
            ).scalar_one()
        return float(nova_nota)

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
        classe_orm, classe_dominio = _MAPEAMENTO[CategoriaHistorico(categoria)]
        with self._fabrica_sessao.begin() as sessao:
            linha = sessao.get(classe_orm, registro_id)
            if linha is None:
                return None
            registro = classe_dominio.model_validate(linha)
            sessao.delete(linha)
        return registro
