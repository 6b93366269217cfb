"""Livro-razão da nota disciplinar.

Responsabilidades:
- Aplicar deltas assinados à nota persistida do aluno
- Reverter deltas quando elogios ou termos são excluídos
- Reportar falhas de atualização como inconsistência (registro já salvo)
"""

from disciplina.domain.errors import ErroConsistencia
from disciplina.infrastructure.data.repository import RepositorioDisciplinar
from disciplina.util.logger import FabricaLogger

logger = FabricaLogger.obter("ledger")


class LivroNota:
    """Único caminho de escrita da nota disciplinar.

    A nota nunca é sobrescrita a partir de uma leitura local: cada delta é
    entregue ao incremento atômico do repositório, de modo que operações
    concorrentes sobre o mesmo aluno não perdem contribuições. Não há piso
    nem teto para a nota.
    """

    def __init__(self, repositorio: RepositorioDisciplinar):
        self.repositorio = repositorio

    def aplicar_delta(self, aluno_id: str, delta: float, registro_id: str = None) -> float:
        """Soma o delta à nota atual do aluno.

        Parâmetros:
        - aluno_id (str): aluno alvo
        - delta (float): valor assinado
        - registro_id (str | None): registro que originou o delta, para rastreio

        Retorno:
        - float: nota atualizada

        Exceções:
        - ErroConsistencia: falha no incremento ou aluno removido no meio da operação
        """
        try:
            if delta == 0:
                aluno = self.repositorio.obter_aluno(aluno_id)
                if aluno is None:
                    raise LookupError(f"Aluno {aluno_id} não encontrado.")
                return aluno.nota_disciplinar

            nova_nota = self.repositorio.incrementar_nota(aluno_id, delta)
        except Exception as erro:
            logger.error(
                f"Falha ao aplicar delta {delta:+.2f} na nota do aluno {aluno_id} "
                f"(registro {registro_id}): {erro}"
            )
            raise ErroConsistencia(
                "Registro salvo, mas a nota pode estar dessincronizada.",
                aluno_id=aluno_id,
                registro_id=registro_id,
                etapa="nota",
                delta=delta,
            ) from erro

        logger.info(f"Nota do aluno {aluno_id} ajustada em {delta:+.2f} -> {nova_nota:.2f}")
        return nova_nota

    def reverter_delta(self, aluno_id: str, delta_original: float, registro_id: str = None) -> float:
        """Desfaz um delta aplicado anteriormente.

        O valor deve ser o gravado no registro, não uma nova consulta às
        tabelas de regras.
        """
        return self.aplicar_delta(aluno_id, -delta_original, registro_id=registro_id)
