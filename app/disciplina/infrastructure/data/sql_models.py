"""Tabelas relacionais da nota disciplinar (SQLAlchemy)."""

import uuid
from datetime import datetime

from sqlalchemy import Boolean, Column, Date, DateTime, Float, ForeignKey, Integer, String, Text
from sqlalchemy.orm import declarative_base

Base = declarative_base()


def _novo_id() -> str:
    return str(uuid.uuid4())


class TurmaModel(Base):
    __tablename__ = "turmas"

    id = Column(String(36), primary_key=True, default=_novo_id)
    nome = Column(String, nullable=False)
    ano_letivo = Column(Integer, nullable=False)


class AlunoModel(Base):
    __tablename__ = "alunos"

    id = Column(String(36), primary_key=True, default=_novo_id)
    nome = Column(String, nullable=False, index=True)
    matricula = Column(String, unique=True, nullable=True)
    turma_id = Column(String(36), ForeignKey("turmas.id"), nullable=True, index=True)
    # Alterada apenas por UPDATE aritmético (incremento atômico).
    nota_disciplinar = Column(Float, nullable=False)
    arquivado = Column(Boolean, nullable=False, default=False)


class AnotacaoModel(Base):
    __tablename__ = "anotacoes"

    id = Column(String(36), primary_key=True, default=_novo_id)
    aluno_id = Column(String(36), ForeignKey("alunos.id", ondelete="CASCADE"), nullable=False, index=True)
    gravidade = Column(String(20), nullable=False)
    descricao = Column(Text, nullable=False)
    criado_em = Column(DateTime, nullable=False, default=datetime.now)
    ano_letivo = Column(Integer, nullable=True)
    lancado_por = Column(String, nullable=True)  # referência fraca ao usuário, sem FK


class ElogioModel(Base):
    __tablename__ = "elogios"

    id = Column(String(36), primary_key=True, default=_novo_id)
    aluno_id = Column(String(36), ForeignKey("alunos.id", ondelete="CASCADE"), nullable=False, index=True)
    tipo = Column(String(20), nullable=False)
    valor = Column(Float, nullable=False)
    descricao = Column(Text, nullable=True)
    criado_em = Column(DateTime, nullable=False, default=datetime.now)
    ano_letivo = Column(Integer, nullable=True)
    lancado_por = Column(String, nullable=True)


class TermoModel(Base):
    __tablename__ = "termos"

    id = Column(String(36), primary_key=True, default=_novo_id)
    aluno_id = Column(String(36), ForeignKey("alunos.id", ondelete="CASCADE"), nullable=False, index=True)
    gravidade = Column(String(20), nullable=False)
    valor_desconto = Column(Float, nullable=False)
    motivo = Column(Text, nullable=True)
    criado_em = Column(DateTime, nullable=False, default=datetime.now)
    ano_letivo = Column(Integer, nullable=True)


class FaltaModel(Base):
    __tablename__ = "faltas"

    id = Column(String(36), primary_key=True, default=_novo_id)
    aluno_id = Column(String(36), ForeignKey("alunos.id", ondelete="CASCADE"), nullable=False, index=True)
    data_inicio = Column(Date, nullable=False)
    data_fim = Column(Date, nullable=False)
    motivo = Column(String, nullable=False)
    detalhes = Column(Text, nullable=True)
    criado_em = Column(DateTime, nullable=False, default=datetime.now)
    ano_letivo = Column(Integer, nullable=True)
    lancado_por = Column(String, nullable=True)
