"""Testes do controlador de turmas e relatórios."""

from unittest.mock import Mock

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from disciplina.api.class_controller import ControladorTurmas, obter_servico_relatorio
from disciplina.api.dependencies import obter_repositorio_api

MONITOR = {"X-Usuario-Id": "u1", "X-Usuario-Papel": "monitor"}


def _cliente(repositorio):
    aplicacao = FastAPI()
    controlador = ControladorTurmas()
    aplicacao.dependency_overrides[obter_repositorio_api] = lambda: repositorio
    aplicacao.include_router(controlador.roteador, prefix="/api/v1")
    return TestClient(aplicacao)


def test_lote_de_elogios(repositorio, turma, alunos_turma):
    resposta = _cliente(repositorio).post(
        f"/api/v1/turmas/{turma.id}/lote",
        json={"tipo": "elogio", "tipo_elogio": "coletivo", "descricao": "Gincana"},
        headers=MONITOR,
    )

    assert resposta.status_code == 200
    corpo = resposta.json()
    assert corpo["total"] == 3
    assert corpo["sucessos"] == 3
    assert all(r["sucesso"] for r in corpo["resultados"])


def test_lote_exige_papel_privilegiado(repositorio, turma, alunos_turma):
    resposta = _cliente(repositorio).post(
        f"/api/v1/turmas/{turma.id}/lote", json={"tipo": "elogio", "tipo_elogio": "coletivo"}
    )

    assert resposta.status_code == 403


def test_lote_operacao_invalida_422(repositorio, turma):
    resposta = _cliente(repositorio).post(
        f"/api/v1/turmas/{turma.id}/lote", json={"tipo": "anotacao", "gravidade": "leve"}, headers=MONITOR
    )

    assert resposta.status_code == 422


def test_lote_turma_inexistente_404(repositorio):
    resposta = _cliente(repositorio).post(
        "/api/v1/turmas/nao-existe/lote", json={"tipo": "elogio", "tipo_elogio": "coletivo"}, headers=MONITOR
    )

    assert resposta.status_code == 404


def test_relatorio_turma(repositorio, turma, alunos_turma):
    resposta = _cliente(repositorio).get(f"/api/v1/turmas/{turma.id}/relatorio")

    assert resposta.status_code == 200
    assert resposta.json()["total_alunos"] == 3
    assert resposta.json()["maxima"] == pytest.approx(9.5)


def test_estatisticas_gerais(repositorio, turma, alunos_turma):
    resposta = _cliente(repositorio).get("/api/v1/relatorios/estatisticas")

    assert resposta.status_code == 200
    assert resposta.json() == {"total_alunos": 3, "total_turmas": 1, "media_disciplinar": 7.5}


def test_relatorio_com_falha_de_leitura_503(repositorio):
    servico = Mock()
    servico.gerar_estatisticas_gerais.side_effect = RuntimeError("banco indisponível")
    aplicacao = FastAPI()
    aplicacao.dependency_overrides[obter_servico_relatorio] = lambda: servico
    aplicacao.include_router(ControladorTurmas().roteador, prefix="/api/v1")

    resposta = TestClient(aplicacao).get("/api/v1/relatorios/estatisticas")

    assert resposta.status_code == 503
    assert "banco indisponível" in resposta.json()["detail"]
