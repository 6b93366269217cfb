"""Gerenciador singleton do repositório disciplinar.

Responsabilidades:
- Escolher o backend configurado (memória ou SQL)
- Expor o repositório carregado
- Garantir thread-safety na criação
"""

from threading import Lock, RLock
from typing import Optional

from disciplina.config.settings import Configuracoes
from disciplina.infrastructure.data.repository import RepositorioDisciplinar
from disciplina.util.logger import logger


class GerenciadorRepositorio:
    """Singleton thread-safe para o repositório da aplicação.

    Responsabilidades:
    - Controlar a instância única
    - Manter o repositório em memória
    - Evitar recriações desnecessárias (e perda do estado em memória)
    """

    BACKENDS = ("memoria", "sql")

    _instancia = None
    _lock = Lock()
    _repositorio_lock = RLock()
    _repositorio: Optional[RepositorioDisciplinar] = None

    def __new__(cls):
        """Cria ou reutiliza a instância única.

        Retorno:
        - GerenciadorRepositorio: instância singleton
        """
        if cls._instancia is None:
            with cls._lock:
                if cls._instancia is None:
                    cls._instancia = super(GerenciadorRepositorio, cls).__new__(cls)
        return cls._instancia

    def carregar_repositorio(self, force: bool = False) -> None:
        """Cria o repositório do backend configurado.

        Parâmetros:
        - force (bool): recria o repositório mesmo quando já existe

        Exceções:
        - ValueError: backend desconhecido
        """
        with self._repositorio_lock:
            if self._repositorio is not None and not force:
                logger.info("Repositório já carregado. Reutilizando.")
                return

            backend = Configuracoes.BACKEND_REPOSITORIO
            if backend not in self.BACKENDS:
                logger.critical(f"Backend de repositório desconhecido: {backend}")
                raise ValueError(f"BACKEND_REPOSITORIO inválido: {backend}. Use um de {self.BACKENDS}.")

            try:
                if backend == "sql":
                    from disciplina.infrastructure.data.sql_repository import RepositorioSql

                    GerenciadorRepositorio._repositorio = RepositorioSql(
                        Configuracoes.DATABASE_URL, echo=Configuracoes.DATABASE_ECHO
                    )
                else:
                    from disciplina.infrastructure.data.memory_repository import RepositorioMemoria

                    GerenciadorRepositorio._repositorio = RepositorioMemoria()
                logger.info(f"Repositório '{backend}' carregado com sucesso!")
            except Exception as erro:
                logger.critical(f"Falha fatal ao carregar o repositório: {erro}")
                raise erro

    def definir_repositorio(self, repositorio: RepositorioDisciplinar) -> None:
        """Substitui o repositório em uso (scripts de carga e testes)."""
        with self._repositorio_lock:
            GerenciadorRepositorio._repositorio = repositorio

    def obter_repositorio(self) -> RepositorioDisciplinar:
        """Retorna o repositório carregado, carregando-o se necessário.

        Exceções:
        - RuntimeError: quando o repositório não está disponível
        """
        if self._repositorio is None:
            self.carregar_repositorio()

        if self._repositorio is None:
            raise RuntimeError("Repositório indisponível.")

        return self._repositorio
