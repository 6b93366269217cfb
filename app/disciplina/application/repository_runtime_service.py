"""Serviços de runtime para acesso ao repositório em produção.

Responsabilidades:
- Encapsular acesso ao gerenciador de repositório da infraestrutura
- Expor funções de aplicação para carga e recuperação do repositório
"""

from disciplina.infrastructure.data.repository_manager import GerenciadorRepositorio


def carregar_repositorio_runtime() -> None:
    """Carrega o repositório configurado via gerenciador de infraestrutura."""
    GerenciadorRepositorio().carregar_repositorio()


def obter_repositorio_runtime():
    """Retorna o repositório pronto para uso."""
    return GerenciadorRepositorio().obter_repositorio()
