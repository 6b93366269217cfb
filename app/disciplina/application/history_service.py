"""Serviço de histórico disciplinar do aluno.

Responsabilidades:
- Consolidar anotações, elogios, termos e faltas em uma única linha do tempo
- Filtrar por ano letivo e listar os anos disponíveis
- Anexar a nota atual e sua faixa de exibição
"""

from datetime import datetime
from typing import Optional

from disciplina.application.grade_mapper import formatar_nota, mapear_faixa
from disciplina.domain.errors import ErroNaoEncontrado
from disciplina.domain.grade import HistoricoAluno, ItemHistorico
from disciplina.domain.records import Anotacao, CategoriaHistorico, Elogio, Falta, Termo
from disciplina.domain.rules import ROTULOS_ANOTACAO, ROTULOS_ELOGIO, ROTULOS_TERMO
from disciplina.infrastructure.data.repository import RepositorioDisciplinar

DESCRICAO_TERMO_PADRAO = "Aplicado automaticamente"
FORMATO_DATA = "%d/%m/%Y"


class ServicoHistorico:
    """Leitura do histórico. Não altera registros nem a nota."""

    def __init__(self, repositorio: RepositorioDisciplinar):
        self.repositorio = repositorio

    def obter_historico(self, aluno_id: str, ano_letivo: Optional[int] = None) -> HistoricoAluno:
        """Monta o histórico do aluno, do mais recente para o mais antigo.

        Parâmetros:
        - aluno_id (str): aluno consultado
        - ano_letivo (int | None): quando informado, filtra os itens do ano

        Retorno:
        - HistoricoAluno: itens, anos disponíveis, nota atual e faixa

        Exceções:
        - ErroNaoEncontrado: aluno inexistente
        """
        aluno = self.repositorio.obter_aluno(aluno_id)
        if aluno is None:
            raise ErroNaoEncontrado(f"Aluno {aluno_id} não encontrado.", aluno_id=aluno_id)

        itens = (
            [self._item_anotacao(a) for a in self.repositorio.listar_anotacoes(aluno.id)]
            + [self._item_elogio(e) for e in self.repositorio.listar_elogios(aluno.id)]
            + [self._item_termo(t) for t in self.repositorio.listar_termos(aluno.id)]
            + [self._item_falta(f) for f in self.repositorio.listar_faltas(aluno.id)]
        )

        anos = sorted({item.ano_letivo for item in itens if item.ano_letivo is not None}, reverse=True)
        if ano_letivo is not None:
            itens = [item for item in itens if item.ano_letivo == ano_letivo]

        itens.sort(key=lambda item: item.criado_em or datetime.min, reverse=True)

        return HistoricoAluno(
            aluno_id=aluno.id,
            nome=aluno.nome,
            nota_disciplinar=aluno.nota_disciplinar,
            nota_formatada=formatar_nota(aluno.nota_disciplinar),
            faixa=mapear_faixa(aluno.nota_disciplinar),
            anos_disponiveis=anos,
            itens=itens,
        )

    def obter_nota(self, aluno_id: str) -> dict:
        """Nota atual do aluno com a faixa de exibição.

        Exceções:
        - ErroNaoEncontrado: aluno inexistente
        """
        aluno = self.repositorio.obter_aluno(aluno_id)
        if aluno is None:
            raise ErroNaoEncontrado(f"Aluno {aluno_id} não encontrado.", aluno_id=aluno_id)
        return {
            "aluno_id": aluno.id,
            "nome": aluno.nome,
            "nota_disciplinar": aluno.nota_disciplinar,
            "nota_formatada": formatar_nota(aluno.nota_disciplinar),
            "faixa": mapear_faixa(aluno.nota_disciplinar).model_dump(),
        }

    @staticmethod
    def _ano(registro) -> Optional[int]:
        if registro.ano_letivo is not None:
            return registro.ano_letivo
        return registro.criado_em.year if registro.criado_em else None

    def _item_anotacao(self, anotacao: Anotacao) -> ItemHistorico:
        gravidade = anotacao.gravidade.value
        return ItemHistorico(
            id=anotacao.id,
            categoria=CategoriaHistorico.ANOTACAO,
            tipo=gravidade,
            rotulo=ROTULOS_ANOTACAO.get(gravidade, gravidade),
            descricao=anotacao.descricao,
            criado_em=anotacao.criado_em,
            ano_letivo=self._ano(anotacao),
            lancado_por=anotacao.lancado_por,
        )

    def _item_elogio(self, elogio: Elogio) -> ItemHistorico:
        tipo = elogio.tipo.value
        return ItemHistorico(
            id=elogio.id,
            categoria=CategoriaHistorico.ELOGIO,
            tipo=tipo,
            rotulo=ROTULOS_ELOGIO.get(tipo, tipo),
            descricao=elogio.descricao or "",
            peso=elogio.valor,
            criado_em=elogio.criado_em,
            ano_letivo=self._ano(elogio),
            lancado_por=elogio.lancado_por,
        )

    def _item_termo(self, termo: Termo) -> ItemHistorico:
        gravidade = termo.gravidade.value
        return ItemHistorico(
            id=termo.id,
            categoria=CategoriaHistorico.TERMO,
            tipo=gravidade,
            rotulo=f"Termo {ROTULOS_TERMO.get(gravidade, gravidade)}",
            descricao=termo.motivo or DESCRICAO_TERMO_PADRAO,
            peso=-termo.valor_desconto,
            criado_em=termo.criado_em,
            ano_letivo=self._ano(termo),
        )

    def _item_falta(self, falta: Falta) -> ItemHistorico:
        periodo = f"{falta.data_inicio.strftime(FORMATO_DATA)} a {falta.data_fim.strftime(FORMATO_DATA)}"
        return ItemHistorico(
            id=falta.id,
            categoria=CategoriaHistorico.FALTA,
            tipo="falta",
            rotulo=falta.motivo,
            descricao=falta.detalhes or periodo,
            criado_em=falta.criado_em,
            ano_letivo=self._ano(falta),
            lancado_por=falta.lancado_por,
        )
