"""Testes do avaliador de acúmulo."""

import pytest

from disciplina.application.accumulation_evaluator import AvaliadorAcumulo, avaliar_acumulo
from disciplina.domain.records import Anotacao, GravidadeAnotacao


def _historico(quantidade, gravidade="leve"):
    return [gravidade] * quantidade


@pytest.mark.parametrize("anteriores", [0, 1, 2])
def test_leves_abaixo_do_limite_nao_geram_termo(anteriores):
    assert avaliar_acumulo("leve", _historico(anteriores)) == []


def test_quarta_leve_gera_termo_grave():
    termos = avaliar_acumulo(GravidadeAnotacao.LEVE, _historico(3))

    assert len(termos) == 1
    assert termos[0].gravidade == GravidadeAnotacao.GRAVE
    assert termos[0].valor_desconto == pytest.approx(0.50)
    assert "leves" in termos[0].motivo


def test_terceira_media_gera_termo_gravissimo():
    termos = avaliar_acumulo("media", _historico(2, "media"))

    assert len(termos) == 1
    assert termos[0].gravidade == GravidadeAnotacao.GRAVISSIMA
    assert termos[0].valor_desconto == pytest.approx(1.00)


def test_quinta_leve_nao_gera_segundo_termo():
    assert avaliar_acumulo("leve", _historico(4)) == []


def test_exatamente_um_termo_ate_2n_menos_1():
    historico = []
    total_termos = 0
    for _ in range(7):
        total_termos += len(avaliar_acumulo("leve", historico))
        historico.append("leve")

    assert total_termos == 1
    assert len(avaliar_acumulo("leve", historico)) == 1


def test_historico_com_a_nova_anotacao_antecipa_o_limite():
    # Se a anotação recém-gravada não for excluída do histórico, ela conta duas vezes.
    assert avaliar_acumulo("leve", _historico(2)) == []
    assert len(avaliar_acumulo("leve", _historico(3))) == 1


@pytest.mark.parametrize("gravidade", ["grave", "gravissima", "desconhecida", None])
def test_gravidades_sem_regra_nao_geram_termo(gravidade):
    assert avaliar_acumulo(gravidade, _historico(10) + _historico(10, "media")) == []


def test_gravidades_nao_se_misturam():
    assert avaliar_acumulo("leve", _historico(5, "media")) == []
    assert avaliar_acumulo("media", _historico(7)) == []


def test_historico_aceita_modelos_dicts_e_ignora_desconhecidos():
    historico = [
        Anotacao(aluno_id="a1", gravidade="leve", descricao="x"),
        {"gravidade": "leve"},
        "LEVE",
        "legado",
        {"sem_gravidade": True},
    ]

    assert len(avaliar_acumulo("leve", historico)) == 1


def test_carga_retroativa_gera_um_termo_por_limite_cruzado():
    termos = AvaliadorAcumulo.avaliar("leve", _historico(3), quantidade_nova=9)

    assert len(termos) == 3
    assert all(t.gravidade == GravidadeAnotacao.GRAVE for t in termos)


def test_quantidade_nao_positiva_nao_gera_termo():
    assert AvaliadorAcumulo.avaliar("leve", _historico(3), quantidade_nova=0) == []


def test_limite_zero_desativa_regra(monkeypatch):
    monkeypatch.setattr("disciplina.domain.rules.Configuracoes.LIMITE_ACUMULO_LEVES", 0)

    assert avaliar_acumulo("leve", _historico(3)) == []
