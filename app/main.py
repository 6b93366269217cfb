"""Ponto de entrada da API FastAPI.

Responsabilidades:
- Configurar a aplicação FastAPI
- Registrar rotas e eventos
- Inicializar o repositório no startup
"""

import os

import uvicorn
from fastapi import FastAPI, HTTPException

from disciplina.api.class_controller import ControladorTurmas
from disciplina.api.enrollment_controller import ControladorCadastro
from disciplina.api.record_controller import ControladorRegistros
from disciplina.application.repository_runtime_service import carregar_repositorio_runtime, obter_repositorio_runtime
from disciplina.util.logger import logger

app = FastAPI(
    title="Nota Disciplinar",
    description="API de anotações, elogios, termos e faltas com cálculo da nota disciplinar",
    version="1.0.0",
)


@app.on_event("startup")
async def evento_inicializacao():
    """Executa ações de inicialização da aplicação.

    Responsabilidades:
    - Registrar log de inicialização
    - Carregar o repositório configurado
    """
    logger.info("Inicializando recursos da API...")
    carregar_repositorio_runtime()


controlador_registros = ControladorRegistros()
app.include_router(controlador_registros.roteador, prefix="/api/v1", tags=["Registros"])

controlador_cadastro = ControladorCadastro()
app.include_router(controlador_cadastro.roteador, prefix="/api/v1", tags=["Cadastro"])

controlador_turmas = ControladorTurmas()
app.include_router(controlador_turmas.roteador, prefix="/api/v1", tags=["Turmas e Relatórios"])


@app.get("/health", tags=["Infraestrutura"])
def checar_saude():
    """Endpoint de health check.

    Retorno:
    - dict: status da aplicação
    """
    try:
        obter_repositorio_runtime()
        return {"status": "ok"}
    except Exception as erro:
        raise HTTPException(status_code=503, detail=str(erro))


if __name__ == "__main__":
    porta = int(os.getenv("PORT", 8000))
    uvicorn.run(app, host="0.0.0.0", port=porta)
