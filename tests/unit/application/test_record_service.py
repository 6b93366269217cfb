"""Testes do serviço de lançamento de registros."""

import threading
from datetime import date, datetime
from unittest.mock import Mock

import pytest

from disciplina.application.record_service import ServicoRegistro
from disciplina.domain.errors import (
    ErroConsistencia,
    ErroNaoEncontrado,
    ErroPersistencia,
    ErroValidacao,
)
from disciplina.domain.records import Anotacao, CategoriaHistorico, GravidadeAnotacao, OperacaoLote
from disciplina.domain.rules import VALORES_ELOGIO
from disciplina.domain.student import Aluno, Ator, Turma
from disciplina.infrastructure.data.memory_repository import RepositorioMemoria

MONITOR = Ator(usuario_id="monitor-1", papel="monitor", privilegiado=True)


def _nota(repositorio, aluno_id):
    return repositorio.obter_aluno(aluno_id).nota_disciplinar


def _lancar_leves(servico, aluno_id, quantidade):
    return [servico.registrar_anotacao(aluno_id, "leve", f"Leve {i}") for i in range(quantidade)]


def test_cenario_elogio_termo_e_exclusao(repositorio, aluno):
    servico = ServicoRegistro(repositorio)

    resultado = servico.registrar_elogio(aluno.id, "mencao_honrosa", ator=MONITOR)
    assert resultado.nota_atual == pytest.approx(8.60)

    resultados = _lancar_leves(servico, aluno.id, 4)
    assert [len(r.termos_gerados) for r in resultados] == [0, 0, 0, 1]
    assert resultados[-1].delta == pytest.approx(-0.50)
    assert _nota(repositorio, aluno.id) == pytest.approx(8.10)

    termo = resultados[-1].termos_gerados[0]
    exclusao = servico.excluir_item_historico("termo", termo.id)

    assert exclusao.delta == pytest.approx(0.50)
    assert exclusao.nota_atual == pytest.approx(8.60)
    assert _nota(repositorio, aluno.id) == pytest.approx(8.60)


def test_anotacao_grava_ano_letivo_da_turma_e_autor(repositorio, aluno):
    resultado = ServicoRegistro(repositorio).registrar_anotacao(aluno.id, "media", "Atraso", MONITOR)

    assert resultado.categoria == CategoriaHistorico.ANOTACAO
    assert resultado.registro.ano_letivo == 2024
    assert resultado.registro.lancado_por == "monitor-1"
    assert resultado.termos_gerados == []
    assert resultado.nota_atual == pytest.approx(8.0)


def test_ano_letivo_sem_turma_usa_ano_corrente(repositorio):
    sem_turma = repositorio.inserir_aluno(Aluno(nome="Sem Turma"))

    resultado = ServicoRegistro(repositorio).registrar_anotacao(sem_turma.id, "leve", "Conversa")

    assert resultado.registro.ano_letivo == date.today().year


def test_termo_herda_ano_letivo_da_anotacao(repositorio, aluno):
    resultados = _lancar_leves(ServicoRegistro(repositorio), aluno.id, 4)

    assert resultados[-1].termos_gerados[0].ano_letivo == 2024


def test_terceira_media_desconta_um_ponto(repositorio, aluno):
    servico = ServicoRegistro(repositorio)
    for i in range(3):
        resultado = servico.registrar_anotacao(aluno.id, "media", f"Media {i}")

    assert resultado.termos_gerados[0].gravidade == GravidadeAnotacao.GRAVISSIMA
    assert _nota(repositorio, aluno.id) == pytest.approx(7.0)


def test_anotacoes_graves_geram_termo_imediato(repositorio, aluno):
    servico = ServicoRegistro(repositorio)

    grave = servico.registrar_anotacao(aluno.id, "grave", "Briga")
    assert grave.delta == pytest.approx(-0.50)
    assert grave.nota_atual == pytest.approx(7.50)
    assert grave.termos_gerados[0].gravidade == GravidadeAnotacao.GRAVE
    assert grave.termos_gerados[0].motivo == "Anotação grave"

    gravissima = servico.registrar_anotacao(aluno.id, "gravissima", "Dano ao patrimônio")
    assert gravissima.termos_gerados[0].valor_desconto == pytest.approx(1.00)
    assert gravissima.nota_atual == pytest.approx(6.50)

    assert len(repositorio.listar_termos(aluno.id)) == 2
    assert _nota(repositorio, aluno.id) == pytest.approx(6.50)


def test_anotacao_grave_nao_conta_para_acumulo(repositorio, aluno):
    servico = ServicoRegistro(repositorio)
    _lancar_leves(servico, aluno.id, 3)

    servico.registrar_anotacao(aluno.id, "grave", "Briga")
    quarta_leve = servico.registrar_anotacao(aluno.id, "leve", "Quarta")

    assert len(quarta_leve.termos_gerados) == 1
    assert _nota(repositorio, aluno.id) == pytest.approx(7.0)


def test_excluir_termo_imediato_reverte_desconto(repositorio, aluno):
    servico = ServicoRegistro(repositorio)
    termo = servico.registrar_anotacao(aluno.id, "gravissima", "Dano").termos_gerados[0]

    servico.excluir_item_historico("termo", termo.id)

    assert _nota(repositorio, aluno.id) == pytest.approx(8.0)
    assert len(repositorio.listar_anotacoes(aluno.id)) == 1


class _RepositorioComBarreira(RepositorioMemoria):
    """Segura a leitura de anotações até as duas threads terem gravado a sua."""

    def __init__(self, partes):
        super().__init__()
        self.barreira = threading.Barrier(partes, timeout=5)

    def listar_anotacoes(self, aluno_id):
        self.barreira.wait()
        return super().listar_anotacoes(aluno_id)


def test_leves_concorrentes_geram_um_unico_termo():
    repositorio = _RepositorioComBarreira(2)
    aluno = repositorio.inserir_aluno(Aluno(nome="Ana Souza", nota_disciplinar=8.0))
    for i in range(2):
        repositorio.inserir_anotacao(
            Anotacao(aluno_id=aluno.id, gravidade="leve", descricao=f"Antiga {i}", criado_em=datetime(2024, 3, 1, 8, i))
        )
    servico = ServicoRegistro(repositorio)
    resultados = []

    def _lancar(descricao):
        resultados.append(servico.registrar_anotacao(aluno.id, "leve", descricao))

    threads = [threading.Thread(target=_lancar, args=(f"Concorrente {i}",)) for i in range(2)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert len(resultados) == 2
    assert sorted(len(r.termos_gerados) for r in resultados) == [0, 1]
    assert len(repositorio.listar_termos(aluno.id)) == 1
    assert _nota(repositorio, aluno.id) == pytest.approx(7.50)


def test_excluir_elogio_reverte_valor_gravado(repositorio, aluno, monkeypatch):
    servico = ServicoRegistro(repositorio)
    elogio = servico.registrar_elogio(aluno.id, "individual").registro
    assert elogio.valor == pytest.approx(0.40)

    monkeypatch.setitem(VALORES_ELOGIO, "individual", 0.90)
    exclusao = servico.excluir_item_historico(CategoriaHistorico.ELOGIO, elogio.id)

    assert exclusao.delta == pytest.approx(-0.40)
    assert _nota(repositorio, aluno.id) == pytest.approx(8.0)
    assert repositorio.listar_elogios(aluno.id) == []


def test_excluir_anotacao_mantem_termos(repositorio, aluno):
    servico = ServicoRegistro(repositorio)
    resultados = _lancar_leves(servico, aluno.id, 4)

    exclusao = servico.excluir_item_historico("anotacao", resultados[-1].registro.id)

    assert exclusao.delta == 0.0
    assert exclusao.nota_atual is None
    assert len(repositorio.listar_anotacoes(aluno.id)) == 3
    assert len(repositorio.listar_termos(aluno.id)) == 1
    assert _nota(repositorio, aluno.id) == pytest.approx(7.50)


def test_excluir_falta_nao_altera_nota(repositorio, aluno):
    servico = ServicoRegistro(repositorio)
    falta = servico.registrar_falta(aluno.id, "2024-04-01", "2024-04-03", "Atestado").registro

    servico.excluir_item_historico("falta", falta.id)

    assert repositorio.listar_faltas(aluno.id) == []
    assert _nota(repositorio, aluno.id) == pytest.approx(8.0)


def test_excluir_registro_inexistente(repositorio):
    with pytest.raises(ErroNaoEncontrado):
        ServicoRegistro(repositorio).excluir_item_historico("elogio", "nao-existe")


@pytest.mark.parametrize("categoria, registro_id", [("advertencia", "r1"), ("elogio", ""), ("termo", "   ")])
def test_excluir_com_entrada_invalida(repositorio, categoria, registro_id):
    with pytest.raises(ErroValidacao):
        ServicoRegistro(repositorio).excluir_item_historico(categoria, registro_id)


def test_registrar_falta_nao_altera_nota(repositorio, aluno):
    resultado = ServicoRegistro(repositorio).registrar_falta(
        aluno.id, date(2024, 5, 2), date(2024, 5, 3), "Viagem", detalhes="  ", ator=MONITOR
    )

    assert resultado.delta == 0.0
    assert resultado.registro.detalhes is None
    assert resultado.registro.lancado_por == "monitor-1"
    assert _nota(repositorio, aluno.id) == pytest.approx(8.0)


def test_registrar_falta_periodo_invalido(repositorio, aluno):
    with pytest.raises(ErroValidacao):
        ServicoRegistro(repositorio).registrar_falta(aluno.id, "2024-05-03", "2024-05-02", "Viagem")

    assert repositorio.listar_faltas(aluno.id) == []


def test_validacao_antes_de_qualquer_escrita(repositorio, aluno):
    servico = ServicoRegistro(repositorio)

    with pytest.raises(ErroValidacao):
        servico.registrar_anotacao(aluno.id, "leve", "   ")
    with pytest.raises(ErroValidacao):
        servico.registrar_anotacao(aluno.id, "inexistente", "Conversa")
    with pytest.raises(ErroValidacao):
        servico.registrar_elogio(aluno.id, "medalha")
    with pytest.raises(ErroValidacao):
        servico.registrar_elogio("", "coletivo")

    assert repositorio.listar_anotacoes(aluno.id) == []
    assert repositorio.listar_elogios(aluno.id) == []


def test_aluno_inexistente(repositorio):
    with pytest.raises(ErroNaoEncontrado):
        ServicoRegistro(repositorio).registrar_elogio("fantasma", "coletivo")


def test_falha_ao_gravar_registro_principal(repositorio, aluno):
    repositorio_falho = Mock(wraps=repositorio)
    repositorio_falho.inserir_elogio.side_effect = OSError("disco cheio")

    with pytest.raises(ErroPersistencia) as erro:
        ServicoRegistro(repositorio_falho).registrar_elogio(aluno.id, "coletivo")

    assert erro.value.etapa == "registro"
    assert _nota(repositorio, aluno.id) == pytest.approx(8.0)


def test_falha_na_nota_depois_do_registro_salvo(repositorio, aluno):
    repositorio_falho = Mock(wraps=repositorio)
    repositorio_falho.incrementar_nota.side_effect = RuntimeError("timeout")

    with pytest.raises(ErroConsistencia) as erro:
        ServicoRegistro(repositorio_falho).registrar_elogio(aluno.id, "coletivo")

    elogios = repositorio.listar_elogios(aluno.id)
    assert len(elogios) == 1
    assert erro.value.registro_id == elogios[0].id
    assert erro.value.etapa == "nota"
    assert _nota(repositorio, aluno.id) == pytest.approx(8.0)


def test_falha_ao_gravar_termo(repositorio, aluno):
    servico = ServicoRegistro(repositorio)
    _lancar_leves(servico, aluno.id, 3)

    repositorio_falho = Mock(wraps=repositorio)
    repositorio_falho.inserir_termo.side_effect = RuntimeError("falha no termo")

    with pytest.raises(ErroConsistencia) as erro:
        ServicoRegistro(repositorio_falho).registrar_anotacao(aluno.id, "leve", "Quarta")

    assert erro.value.etapa == "termo"
    assert len(repositorio.listar_anotacoes(aluno.id)) == 4
    assert repositorio.listar_termos(aluno.id) == []
    assert _nota(repositorio, aluno.id) == pytest.approx(8.0)


class _RepositorioComFalhaNaNota(RepositorioMemoria):
    def __init__(self, aluno_falho):
        super().__init__()
        self.aluno_falho = aluno_falho

    def incrementar_nota(self, aluno_id, delta):
        if aluno_id == self.aluno_falho:
            raise RuntimeError("conexão perdida")
        return super().incrementar_nota(aluno_id, delta)


def _popular_turma(repositorio, turma):
    return [
        repositorio.inserir_aluno(Aluno(id=aluno_id, nome=nome, turma_id=turma.id))
        for aluno_id, nome in [("a1", "Ana"), ("a2", "Bruno"), ("a3", "Carla")]
    ]


def test_lote_aplica_a_todos_os_alunos_ativos(repositorio, turma, alunos_turma):
    resumo = ServicoRegistro(repositorio).aplicar_em_lote(
        turma.id, {"tipo": "elogio", "tipo_elogio": "coletivo"}, MONITOR
    )

    assert resumo.total == 3
    assert resumo.sucessos == 3
    assert resumo.falhas == 0
    for aluno in alunos_turma:
        assert _nota(repositorio, aluno.id) == pytest.approx(aluno.nota_disciplinar + 0.20)
    arquivado = next(a for a in repositorio.listar_alunos(turma.id, incluir_arquivados=True) if a.arquivado)
    assert repositorio.listar_elogios(arquivado.id) == []


def test_lote_continua_apos_falha_de_um_aluno():
    repositorio = _RepositorioComFalhaNaNota("a2")
    turma = repositorio.inserir_turma(Turma(nome="2º Ano B", ano_letivo=2024))
    _popular_turma(repositorio, turma)

    resumo = ServicoRegistro(repositorio).aplicar_em_lote(
        turma.id, OperacaoLote(tipo="elogio", tipo_elogio="individual"), MONITOR
    )

    assert (resumo.total, resumo.sucessos, resumo.falhas) == (3, 2, 1)
    falha = next(r for r in resumo.resultados if not r.sucesso)
    assert falha.aluno_id == "a2"
    assert falha.etapa == "nota"
    assert falha.registro_id is not None
    assert repositorio.obter_aluno("a1").nota_disciplinar == pytest.approx(8.40)
    assert repositorio.obter_aluno("a3").nota_disciplinar == pytest.approx(8.40)
    assert repositorio.obter_aluno("a2").nota_disciplinar == pytest.approx(8.0)


def test_lote_de_anotacoes_avalia_acumulo_por_aluno(repositorio, turma, aluno):
    servico = ServicoRegistro(repositorio)
    _lancar_leves(servico, aluno.id, 3)

    resumo = servico.aplicar_em_lote(turma.id, {"tipo": "anotacao", "gravidade": "leve", "descricao": "Barulho"})

    assert resumo.sucessos == 1
    assert len(repositorio.listar_termos(aluno.id)) == 1
    assert resumo.resultados[0].nota_atual == pytest.approx(7.50)


def test_lote_operacao_invalida_nao_grava(repositorio, turma, aluno):
    with pytest.raises(ErroValidacao):
        ServicoRegistro(repositorio).aplicar_em_lote(turma.id, {"tipo": "anotacao", "gravidade": "leve"})

    assert repositorio.listar_anotacoes(aluno.id) == []


def test_lote_turma_inexistente(repositorio):
    with pytest.raises(ErroNaoEncontrado):
        ServicoRegistro(repositorio).aplicar_em_lote("sem-turma", {"tipo": "elogio", "tipo_elogio": "coletivo"})
