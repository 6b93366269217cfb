"""Erros de domínio da nota disciplinar.

Responsabilidades:
- Distinguir entrada inválida, registro inexistente e falhas de escrita
- Identificar o aluno, o registro e a etapa em que a falha ocorreu
"""

from typing import Optional


class ErroDisciplinar(Exception):
    """Base dos erros do domínio.

    Atributos:
    - aluno_id (str | None): aluno afetado
    - registro_id (str | None): registro afetado, quando já existe
    - etapa (str): etapa do fluxo em que a falha ocorreu
    """

    etapa_padrao = "desconhecida"

    def __init__(
        self,
        mensagem: str,
        aluno_id: Optional[str] = None,
        registro_id: Optional[str] = None,
        etapa: Optional[str] = None,
    ):
        super().__init__(mensagem)
        self.mensagem = mensagem
        self.aluno_id = aluno_id
        self.registro_id = registro_id
        self.etapa = etapa or self.etapa_padrao

    def para_dict(self) -> dict:
        """Serializa o erro para respostas da API e logs."""
        return {
            "mensagem": self.mensagem,
            "aluno_id": self.aluno_id,
            "registro_id": self.registro_id,
            "etapa": self.etapa,
        }


class ErroValidacao(ErroDisciplinar, ValueError):
    """Entrada malformada; rejeitada antes de qualquer escrita."""

    etapa_padrao = "validacao"


class ErroNaoEncontrado(ErroDisciplinar, LookupError):
    """Aluno, turma ou registro inexistente."""

    etapa_padrao = "consulta"


class ErroPersistencia(ErroDisciplinar, RuntimeError):
    """Falha ao gravar o registro principal; a nota não foi alterada."""

    etapa_padrao = "registro"


class ErroConsistencia(ErroDisciplinar, RuntimeError):
    """O registro foi salvo, mas a atualização da nota falhou.

    Não há rollback: quem chama deve avisar que a nota pode estar
    dessincronizada e permitir a conciliação manual.
    """

    etapa_padrao = "nota"

    def __init__(
        self,
        mensagem: str,
        aluno_id: Optional[str] = None,
        registro_id: Optional[str] = None,
        etapa: Optional[str] = None,
        delta: float = 0.0,
    ):
        super().__init__(mensagem, aluno_id=aluno_id, registro_id=registro_id, etapa=etapa)
        self.delta = delta

    def para_dict(self) -> dict:
        dados = super().para_dict()
        dados["delta"] = self.delta
        return dados
