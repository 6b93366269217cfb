"""Dependências compartilhadas pelos controladores.

Responsabilidades:
- Resolver o repositório em uso
- Identificar o ator a partir dos cabeçalhos da requisição
- Traduzir erros de domínio em respostas HTTP
"""

from typing import Optional

from fastapi import Depends, Header, HTTPException

from disciplina.application.repository_runtime_service import obter_repositorio_runtime
from disciplina.config.settings import Configuracoes
from disciplina.domain.errors import (
    ErroConsistencia,
    ErroDisciplinar,
    ErroNaoEncontrado,
    ErroPersistencia,
    ErroValidacao,
)
from disciplina.domain.student import Ator

ERROS_MAPEADOS = (ErroDisciplinar, ValueError, RuntimeError)


def obter_repositorio_api():
    """Dependência que entrega o repositório carregado.

    Exceções:
    - HTTPException: 503 quando o repositório não está disponível
    """
    try:
        return obter_repositorio_runtime()
    except (RuntimeError, ValueError) as erro:
        raise HTTPException(status_code=503, detail=f"Repositório não inicializado. {str(erro)}")


def obter_ator(
    x_usuario_id: Optional[str] = Header(default=None),
    x_usuario_papel: Optional[str] = Header(default=None),
) -> Ator:
    """Monta o ator a partir de X-Usuario-Id e X-Usuario-Papel."""
    papel = (x_usuario_papel or "").strip().lower() or None
    return Ator(
        usuario_id=x_usuario_id,
        papel=papel,
        privilegiado=papel in Configuracoes.PAPEIS_PRIVILEGIADOS,
    )


def exigir_ator_privilegiado(ator: Ator = Depends(obter_ator)) -> Ator:
    """Bloqueia lançamentos de quem não tem papel privilegiado.

    Exceções:
    - HTTPException: 403 para atores sem permissão
    """
    if not ator.privilegiado:
        raise HTTPException(status_code=403, detail="Operação permitida apenas para administradores e monitores.")
    return ator


def traduzir_erro(erro: Exception) -> HTTPException:
    """Converte um erro de domínio na resposta HTTP correspondente.

    - ErroValidacao e ValueError: 400
    - ErroNaoEncontrado: 404
    - ErroConsistencia: 409, com o detalhe estruturado
    - ErroPersistencia e RuntimeError: 503
    """
    if isinstance(erro, ErroConsistencia):
        return HTTPException(status_code=409, detail=erro.para_dict())
    if isinstance(erro, ErroNaoEncontrado):
        return HTTPException(status_code=404, detail=str(erro))
    if isinstance(erro, (ErroValidacao, ValueError)):
        return HTTPException(status_code=400, detail=str(erro))
    if isinstance(erro, (ErroPersistencia, RuntimeError)):
        return HTTPException(status_code=503, detail=str(erro))
    return HTTPException(status_code=500, detail="Erro interno.")