"""Serviço de relatórios da nota disciplinar.

Responsabilidades:
- Gerar o relatório de uma turma (estatísticas, faixas e classificação)
- Gerar estatísticas gerais da escola
"""

from datetime import datetime

import pandas as pd

from disciplina.application.grade_mapper import FAIXAS, mapear_faixa
from disciplina.domain.errors import ErroNaoEncontrado
from disciplina.infrastructure.data.repository import RepositorioDisciplinar
from disciplina.util.logger import FabricaLogger

logger = FabricaLogger.obter("relatorios")

COLUNAS_ALUNOS = ["aluno_id", "nome", "matricula", "nota_disciplinar"]


class ServicoRelatorio:
    """Consolida notas de alunos ativos em relatórios tabulares.

    Alunos arquivados ficam fora de todos os relatórios.
    """

    def __init__(self, repositorio: RepositorioDisciplinar):
        self.repositorio = repositorio

    def _montar_dataframe(self, turma_id: str = None) -> pd.DataFrame:
        alunos = self.repositorio.listar_alunos(turma_id=turma_id, incluir_arquivados=False)
        linhas = [
            {
                "aluno_id": aluno.id,
                "nome": aluno.nome,
                "matricula": aluno.matricula,
                "nota_disciplinar": aluno.nota_disciplinar,
            }
            for aluno in alunos
        ]
        return pd.DataFrame(linhas, columns=COLUNAS_ALUNOS)

    @staticmethod
    def _arredondar(valor) -> float:
        return round(float(valor), 4) if pd.notna(valor) else None

    def gerar_relatorio_turma(self, turma_id: str) -> dict:
        """Relatório de uma turma.

        Parâmetros:
        - turma_id (str): turma consultada

        Retorno:
        - dict: estatísticas da nota, distribuição por faixa e alunos
          classificados da maior para a menor nota

        Exceções:
        - ErroNaoEncontrado: turma inexistente
        """
        turma = self.repositorio.obter_turma(turma_id)
        if turma is None:
            raise ErroNaoEncontrado(f"Turma {turma_id} não encontrada.")

        df = self._montar_dataframe(turma.id)
        distribuicao = {faixa.rotulo: 0 for faixa in FAIXAS}

        estatisticas = {"media": None, "mediana": None, "minima": None, "maxima": None}
        alunos = []
        if not df.empty:
            df["faixa"] = df["nota_disciplinar"].apply(lambda nota: mapear_faixa(nota).rotulo)
            df = df.sort_values(["nota_disciplinar", "nome"], ascending=[False, True]).reset_index(drop=True)
            df["posicao"] = df.index + 1
            distribuicao.update({str(k): int(v) for k, v in df["faixa"].value_counts().items()})
            alunos = df.astype(object).where(pd.notna(df), None).to_dict(orient="records")

            notas = df["nota_disciplinar"]
            estatisticas = {
                "media": self._arredondar(notas.mean()),
                "mediana": self._arredondar(notas.median()),
                "minima": self._arredondar(notas.min()),
                "maxima": self._arredondar(notas.max()),
            }

        relatorio = {
            "turma_id": turma.id,
            "turma": turma.nome,
            "ano_letivo": turma.ano_letivo,
            "total_alunos": int(len(df)),
            **estatisticas,
            "distribuicao_faixas": distribuicao,
            "alunos": alunos,
            "gerado_em": datetime.now().isoformat(),
        }
        logger.info(f"Relatório da turma {turma.nome} gerado ({relatorio['total_alunos']} alunos).")
        return relatorio

    def gerar_estatisticas_gerais(self) -> dict:
        """Totais de alunos ativos e turmas, e a média disciplinar geral."""
        df = self._montar_dataframe()
        media = float(df["nota_disciplinar"].mean()) if not df.empty else 0.0
        return {
            "total_alunos": int(len(df)),
            "total_turmas": len(self.repositorio.listar_turmas()),
            "media_disciplinar": round(media, 2),
        }
