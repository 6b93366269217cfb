"""Fábrica de logger da aplicação.

Responsabilidades:
- Configurar o logger raiz da aplicação uma única vez
- Fornecer loggers filhos por componente (ledger, registros, api...)
- Direcionar saída para stdout
"""

import logging
import sys
from typing import Optional

from disciplina.config.settings import Configuracoes

NOME_LOGGER_RAIZ = "NOTA_DISCIPLINAR"


class FabricaLogger:
    """Responsável por configurar e fornecer instâncias de Logger.

    Responsabilidades:
    - Configuração única do handler de console
    - Formatação padronizada
    - Loggers filhos que herdam o handler da raiz
    """

    FORMATO = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    @classmethod
    def configurar(cls, nome: str = NOME_LOGGER_RAIZ, nivel: Optional[str] = None):
        """Configura o logger se ainda não estiver configurado.

        Parâmetros:
        - nome (str): nome do logger
        - nivel (str | None): nível de log; usa Configuracoes.LOG_LEVEL quando omitido

        Retorno:
        - logging.Logger: logger configurado
        """
        logger_instancia = logging.getLogger(nome)

        if not logger_instancia.handlers:
            logger_instancia.setLevel(nivel or getattr(Configuracoes, "LOG_LEVEL", "INFO"))

            formatador = logging.Formatter(fmt=cls.FORMATO, datefmt="%Y-%m-%d %H:%M:%S")
            handler_console = logging.StreamHandler(sys.stdout)
            handler_console.setFormatter(formatador)
            logger_instancia.addHandler(handler_console)

            logger_instancia.propagate = False

        return logger_instancia

    @classmethod
    def obter(cls, componente: str):
        """Retorna um logger filho do logger raiz.

        O filho não recebe handler próprio: as mensagens sobem para a raiz,
        que já está configurada.

        Parâmetros:
        - componente (str): sufixo do nome, por exemplo "ledger"

        Retorno:
        - logging.Logger: logger do componente
        """
        cls.configurar()
        return logging.getLogger(f"{NOME_LOGGER_RAIZ}.{componente}")


logger = FabricaLogger.configurar()
