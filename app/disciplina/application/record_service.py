"""Serviço de lançamento de registros disciplinares.

Responsabilidades:
- Validar entradas antes de qualquer escrita
- Persistir anotações, elogios e faltas com ano letivo e autoria
- Gerar termos (imediatos ou por acúmulo) e ajustar a nota pelo livro-razão
- Excluir itens do histórico revertendo exatamente o valor gravado
- Aplicar operações em lote a uma turma sem interromper nas falhas
"""

from datetime import date
from typing import Callable, Optional, Union

from pydantic import ValidationError

from disciplina.application.accumulation_evaluator import AvaliadorAcumulo
from disciplina.application.score_ledger import LivroNota
from disciplina.domain.errors import (
    ErroConsistencia,
    ErroDisciplinar,
    ErroNaoEncontrado,
    ErroPersistencia,
    ErroValidacao,
)
from disciplina.domain.records import (
    Anotacao,
    CategoriaHistorico,
    Elogio,
    EntradaAnotacao,
    EntradaElogio,
    EntradaFalta,
    Falta,
    OperacaoLote,
    ResultadoExclusao,
    ResultadoLoteAluno,
    ResultadoRegistro,
    ResumoLote,
    Termo,
)
from disciplina.domain.rules import obter_bonus_elogio, obter_termo_direto
from disciplina.domain.student import Aluno, Ator
from disciplina.infrastructure.data.repository import RepositorioDisciplinar
from disciplina.util.logger import FabricaLogger

logger = FabricaLogger.obter("registros")


class ServicoRegistro:
    """Orquestra os fluxos de lançamento e exclusão.

    Ordem de cada fluxo: validar -> gravar o registro principal -> (anotações)
    decidir e gravar termos -> aplicar o delta na nota.

    Falha ao gravar o registro principal: ErroPersistencia, nota intocada.
    Falha depois do registro gravado: ErroConsistencia, sem rollback.
    """

    def __init__(self, repositorio: RepositorioDisciplinar, livro: Optional[LivroNota] = None):
        self.repositorio = repositorio
        self.livro = livro or LivroNota(repositorio)

    # --- Lançamentos --------------------------------------------------------

    def registrar_anotacao(
        self, aluno_id: str, gravidade, descricao: str, ator: Optional[Ator] = None
    ) -> ResultadoRegistro:
        """Lança uma anotação e aplica os termos que ela gerar.

        Graves e gravíssimas geram na hora um termo da mesma gravidade; leves
        e médias passam pelo avaliador de acúmulo.

        Parâmetros:
        - aluno_id (str): aluno alvo
        - gravidade (GravidadeAnotacao | str): leve, media, grave ou gravissima
        - descricao (str): texto obrigatório
        - ator (Ator | None): quem lançou

        Retorno:
        - ResultadoRegistro: anotação gravada, termos gerados, delta e nota

        Exceções:
        - ErroValidacao, ErroNaoEncontrado: nada foi gravado
        - ErroPersistencia: a anotação não foi gravada
        - ErroConsistencia: anotação gravada, nota possivelmente dessincronizada
        """
        entrada = self._validar(EntradaAnotacao, aluno_id, gravidade=gravidade, descricao=descricao)
        aluno = self._obter_aluno(aluno_id)
        ano_letivo = self._resolver_ano_letivo(aluno)

        anotacao = self._persistir(
            lambda: self.repositorio.inserir_anotacao(
                Anotacao(
                    aluno_id=aluno.id,
                    gravidade=entrada.gravidade,
                    descricao=entrada.descricao,
                    ano_letivo=ano_letivo,
                    lancado_por=self._ator_id(ator),
                )
            ),
            aluno.id,
            "a anotação",
        )
        logger.info(f"Anotação {entrada.gravidade.value} {anotacao.id} registrada para o aluno {aluno.id}.")

        termos_gerados = self._gerar_termos(aluno, anotacao, ano_letivo)
        delta = -sum(termo.valor_desconto for termo in termos_gerados)

        nota_atual = aluno.nota_disciplinar
        if delta != 0:
            nota_atual = self.livro.aplicar_delta(aluno.id, delta, registro_id=anotacao.id)

        return ResultadoRegistro(
            categoria=CategoriaHistorico.ANOTACAO,
            registro=anotacao,
            termos_gerados=termos_gerados,
            delta=delta,
            nota_atual=nota_atual,
        )

    def registrar_elogio(
        self, aluno_id: str, tipo, descricao: Optional[str] = None, ator: Optional[Ator] = None
    ) -> ResultadoRegistro:
        """Lança um elogio e soma seu bônus à nota.

        O bônus é gravado no próprio elogio, para que a exclusão reverta o
        mesmo valor mesmo que a tabela de regras mude depois.
        """
        entrada = self._validar(EntradaElogio, aluno_id, tipo=tipo, descricao=descricao)
        aluno = self._obter_aluno(aluno_id)
        valor = obter_bonus_elogio(entrada.tipo)

        elogio = self._persistir(
            lambda: self.repositorio.inserir_elogio(
                Elogio(
                    aluno_id=aluno.id,
                    tipo=entrada.tipo,
                    valor=valor,
                    descricao=entrada.descricao,
                    ano_letivo=self._resolver_ano_letivo(aluno),
                    lancado_por=self._ator_id(ator),
                )
            ),
            aluno.id,
            "o elogio",
        )
        logger.info(f"Elogio {entrada.tipo.value} {elogio.id} registrado para o aluno {aluno.id}.")

        nota_atual = aluno.nota_disciplinar
        if valor != 0:
            nota_atual = self.livro.aplicar_delta(aluno.id, valor, registro_id=elogio.id)

        return ResultadoRegistro(
            categoria=CategoriaHistorico.ELOGIO, registro=elogio, delta=valor, nota_atual=nota_atual
        )

    def registrar_falta(
        self,
        aluno_id: str,
        data_inicio: Union[date, str],
        data_fim: Union[date, str],
        motivo: str,
        detalhes: Optional[str] = None,
        ator: Optional[Ator] = None,
    ) -> ResultadoRegistro:
        """Lança uma falta por período. Nunca altera a nota."""
        entrada = self._validar(
            EntradaFalta,
            aluno_id,
            data_inicio=data_inicio,
            data_fim=data_fim,
            motivo=motivo,
            detalhes=detalhes,
        )
        aluno = self._obter_aluno(aluno_id)

        falta = self._persistir(
            lambda: self.repositorio.inserir_falta(
                Falta(
                    aluno_id=aluno.id,
                    data_inicio=entrada.data_inicio,
                    data_fim=entrada.data_fim,
                    motivo=entrada.motivo,
                    detalhes=entrada.detalhes,
                    ano_letivo=self._resolver_ano_letivo(aluno),
                    lancado_por=self._ator_id(ator),
                )
            ),
            aluno.id,
            "a falta",
        )
        logger.info(f"Falta {falta.id} registrada para o aluno {aluno.id}.")

        return ResultadoRegistro(
            categoria=CategoriaHistorico.FALTA, registro=falta, nota_atual=aluno.nota_disciplinar
        )

    # --- Exclusão -----------------------------------------------------------

    def excluir_item_historico(self, categoria, registro_id: str) -> ResultadoExclusao:
        """Exclui um item do histórico e reverte sua contribuição para a nota.

        Elogios e termos revertem o valor gravado no registro. Anotações e
        faltas não mexem na nota; em particular, excluir uma anotação mantém
        os termos que ela tenha gerado.

        Exceções:
        - ErroValidacao: categoria ou id inválidos
        - ErroNaoEncontrado: registro inexistente
        - ErroPersistencia: a exclusão falhou, nota intocada
        - ErroConsistencia: registro excluído, nota possivelmente dessincronizada
        """
        try:
            categoria = CategoriaHistorico(categoria)
        except ValueError as erro:
            raise ErroValidacao(f"Categoria de histórico inválida: {categoria}") from erro
        if not registro_id or not str(registro_id).strip():
            raise ErroValidacao("Identificador do registro é obrigatório.")

        registro = self._persistir(
            lambda: self.repositorio.excluir_registro(categoria, registro_id),
            None,
            f"a exclusão de {categoria.value}",
            registro_id=registro_id,
        )
        if registro is None:
            raise ErroNaoEncontrado(
                f"Registro {registro_id} ({categoria.value}) não encontrado.", registro_id=registro_id
            )
        logger.info(f"Registro {categoria.value} {registro_id} do aluno {registro.aluno_id} excluído.")

        delta_original = self._delta_original(categoria, registro)
        nota_atual = None
        if delta_original != 0:
            nota_atual = self.livro.reverter_delta(registro.aluno_id, delta_original, registro_id=registro_id)

        return ResultadoExclusao(
            categoria=categoria,
            registro_id=registro_id,
            aluno_id=registro.aluno_id,
            delta=-delta_original if delta_original else 0.0,
            nota_atual=nota_atual,
        )

    # --- Lote ---------------------------------------------------------------

    def aplicar_em_lote(
        self, turma_id: str, operacao: Union[OperacaoLote, dict], ator: Optional[Ator] = None
    ) -> ResumoLote:
        """Aplica uma anotação ou elogio a todos os alunos ativos da turma.

        Os alunos são processados em sequência; a falha de um aluno é
        registrada no resumo e o lote continua.

        Exceções:
        - ErroValidacao: operação malformada (nada é gravado)
        - ErroNaoEncontrado: turma inexistente
        """
        if not isinstance(operacao, OperacaoLote):
            try:
                operacao = OperacaoLote.model_validate(operacao)
            except ValidationError as erro:
                raise ErroValidacao(self._mensagem_validacao(erro)) from erro

        turma = self.repositorio.obter_turma(turma_id)
        if turma is None:
            raise ErroNaoEncontrado(f"Turma {turma_id} não encontrada.")

        alunos = self.repositorio.listar_alunos(turma_id=turma.id, incluir_arquivados=False)
        resumo = ResumoLote(turma_id=turma.id, operacao=operacao.tipo, total=len(alunos))
        logger.info(f"Lote '{operacao.tipo}' iniciado na turma {turma.nome} ({len(alunos)} alunos).")

        for aluno in alunos:
            resumo.resultados.append(self._aplicar_no_aluno(aluno, operacao, ator))

        resumo.sucessos = sum(1 for r in resumo.resultados if r.sucesso)
        resumo.falhas = resumo.total - resumo.sucessos
        if resumo.falhas:
            logger.warning(f"Lote na turma {turma.nome} concluído com {resumo.falhas} falha(s).")
        else:
            logger.info(f"Lote na turma {turma.nome} concluído sem falhas.")
        return resumo

    def _aplicar_no_aluno(self, aluno: Aluno, operacao: OperacaoLote, ator: Optional[Ator]) -> ResultadoLoteAluno:
        try:
            if operacao.tipo == "anotacao":
                resultado = self.registrar_anotacao(aluno.id, operacao.gravidade, operacao.descricao, ator)
            else:
                resultado = self.registrar_elogio(aluno.id, operacao.tipo_elogio, operacao.descricao, ator)
        except ErroDisciplinar as erro:
            logger.warning(f"Lote: falha no aluno {aluno.id} (etapa {erro.etapa}): {erro.mensagem}")
            return ResultadoLoteAluno(
                aluno_id=aluno.id,
                nome=aluno.nome,
                sucesso=False,
                etapa=erro.etapa,
                erro=erro.mensagem,
                registro_id=erro.registro_id,
            )
        except Exception as erro:
            logger.error(f"Lote: erro inesperado no aluno {aluno.id}: {erro}")
            return ResultadoLoteAluno(
                aluno_id=aluno.id, nome=aluno.nome, sucesso=False, etapa="desconhecida", erro=str(erro)
            )

        return ResultadoLoteAluno(
            aluno_id=aluno.id,
            nome=aluno.nome,
            sucesso=True,
            registro_id=resultado.registro.id,
            nota_atual=resultado.nota_atual,
        )

    # --- Auxiliares ---------------------------------------------------------

    def _gerar_termos(self, aluno: Aluno, anotacao: Anotacao, ano_letivo: int) -> list:
        """Decide os termos da anotação recém-gravada e os grava.

        Graves e gravíssimas geram o termo imediato. As demais são avaliadas
        contra as anotações lançadas antes delas.
        """
        termo_direto = obter_termo_direto(anotacao.gravidade)
        if termo_direto is not None:
            termos_a_gerar = [termo_direto]
        else:
            termos_a_gerar = AvaliadorAcumulo.avaliar(anotacao.gravidade, self._anotacoes_anteriores(aluno, anotacao))

        termos_gerados = []
        for termo in termos_a_gerar:
            try:
                gravado = self.repositorio.inserir_termo(
                    Termo(
                        aluno_id=aluno.id,
                        gravidade=termo.gravidade,
                        valor_desconto=termo.valor_desconto,
                        motivo=termo.motivo,
                        ano_letivo=ano_letivo,
                    )
                )
            except Exception as erro:
                # Os termos já gravados continuam valendo: aplica o desconto deles.
                delta_parcial = -sum(t.valor_desconto for t in termos_gerados)
                if delta_parcial != 0:
                    self.livro.aplicar_delta(aluno.id, delta_parcial, registro_id=anotacao.id)
                logger.error(f"Falha ao gravar termo gerado pela anotação {anotacao.id}: {erro}")
                raise ErroConsistencia(
                    "Anotação salva, mas a geração de termos falhou; a nota pode estar dessincronizada.",
                    aluno_id=aluno.id,
                    registro_id=anotacao.id,
                    etapa="termo",
                    delta=delta_parcial,
                ) from erro

            logger.info(
                f"Termo {gravado.gravidade.value} {gravado.id} gerado para o aluno {aluno.id} ({gravado.motivo})."
            )
            termos_gerados.append(gravado)

        return termos_gerados

    def _anotacoes_anteriores(self, aluno: Aluno, anotacao: Anotacao) -> list:
        """Anotações do aluno gravadas até `anotacao`, exceto ela mesma.

        Anotações concorrentes gravadas depois ficam de fora: só a posterior
        enxerga a outra e o limite é cruzado uma única vez. Empates de
        `criado_em` contam como anteriores.
        """
        try:
            anotacoes = self.repositorio.listar_anotacoes(aluno.id)
        except Exception as erro:
            logger.error(f"Falha ao ler anotações do aluno {aluno.id} para avaliar acúmulo: {erro}")
            raise ErroConsistencia(
                "Anotação salva, mas o acúmulo não pôde ser avaliado.",
                aluno_id=aluno.id,
                registro_id=anotacao.id,
                etapa="termo",
            ) from erro

        return [
            a
            for a in anotacoes
            if a.id != anotacao.id
            and (a.criado_em is None or anotacao.criado_em is None or a.criado_em <= anotacao.criado_em)
        ]

    @staticmethod
    def _delta_original(categoria: CategoriaHistorico, registro) -> float:
        """Delta aplicado na criação do registro, lido do próprio registro."""
        if categoria == CategoriaHistorico.ELOGIO:
            return float(registro.valor)
        if categoria == CategoriaHistorico.TERMO:
            return -float(registro.valor_desconto)
        return 0.0

    def _validar(self, modelo, aluno_id: str, **campos):
        if not aluno_id or not str(aluno_id).strip():
            raise ErroValidacao("Identificador do aluno é obrigatório.")
        try:
            return modelo(**campos)
        except ValidationError as erro:
            raise ErroValidacao(self._mensagem_validacao(erro), aluno_id=aluno_id) from erro

    @staticmethod
    def _mensagem_validacao(erro: ValidationError) -> str:
        partes = []
        for detalhe in erro.errors():
            campo = ".".join(str(parte) for parte in detalhe.get("loc", ())) or "entrada"
            partes.append(f"{campo}: {detalhe.get('msg')}")
        return "; ".join(partes)

    def _obter_aluno(self, aluno_id: str) -> Aluno:
        aluno = self.repositorio.obter_aluno(aluno_id)
        if aluno is None:
            raise ErroNaoEncontrado(f"Aluno {aluno_id} não encontrado.", aluno_id=aluno_id)
        return aluno

    def _resolver_ano_letivo(self, aluno: Aluno) -> int:
        """Ano letivo da turma atual do aluno; ano corrente se não houver turma."""
        if aluno.turma_id:
            turma = self.repositorio.obter_turma(aluno.turma_id)
            if turma is not None:
                return turma.ano_letivo
        return date.today().year

    @staticmethod
    def _ator_id(ator: Optional[Ator]) -> Optional[str]:
        return ator.usuario_id if ator is not None else None

    @staticmethod
    def _persistir(operacao: Callable, aluno_id: Optional[str], descricao: str, registro_id: str = None):
        try:
            return operacao()
        except ErroDisciplinar:
            raise
        except Exception as erro:
            logger.error(f"Falha ao gravar {descricao} (aluno {aluno_id}): {erro}")
            raise ErroPersistencia(
                f"Não foi possível gravar {descricao}.", aluno_id=aluno_id, registro_id=registro_id
            ) from erro
