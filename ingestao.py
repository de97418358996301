import argparse
import os
import sys
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, File, HTTPException, UploadFile

import config
from analitica import ingerir_analitica
from dados import carregar_dados, guardar_dados, upsert_mes
from erros import ArmazemInvalidoError, IngestaoError, PlanilhaInvalidaError
from gerencial import enriquecer_gerencial
from meses import GrupoMes, agrupar_ficheiros
from modelos import RegistoMes
from planilhas import ler_primeira_folha

router = APIRouter()


@dataclass
class RelatorioIngestao:
    """O que aconteceu numa execução (só em memória; os avisos também vão para a consola)."""

    ficheiros: List[str] = field(default_factory=list)
    meses: Dict[str, str] = field(default_factory=dict)
    meses_ignorados: List[str] = field(default_factory=list)
    sem_match: Dict[str, List[str]] = field(default_factory=dict)
    avisos: List[str] = field(default_factory=list)
    gravado: bool = False

    def avisar(self, msg: str) -> None:
        print(f"[INGESTAO] WARNING: {msg}")
        self.avisos.append(msg)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "ficheiros": list(self.ficheiros),
            "meses": dict(self.meses),
            "meses_ignorados": list(self.meses_ignorados),
            "sem_match": {k: list(v) for k, v in self.sem_match.items()},
            "avisos": list(self.avisos),
            "gravado": self.gravado,
        }


def listar_planilhas(uploads_dir: str) -> List[str]:
    """Caminhos dos Excel da pasta, por ordem alfabética (sem ficheiros de lock ~$)."""
    if not os.path.isdir(uploads_dir):
        return []
    nomes = []
    for nome in sorted(os.listdir(uploads_dir)):
        if nome.startswith("~$"):
            continue
        if not nome.lower().endswith(config.EXTENSOES_PLANILHA):
            continue
        caminho = os.path.join(uploads_dir, nome)
        if os.path.isfile(caminho):
            nomes.append(caminho)
    return nomes


def processar_mes(
    rotulo: str,
    grupo: GrupoMes,
    relatorio: Optional[RelatorioIngestao] = None,
) -> RegistoMes:
    """
    Constrói o registo de um mês a partir do par de planilhas:
    analítica (obrigatória) -> gerencial (opcional) -> totais.
    """
    if relatorio is None:
        relatorio = RelatorioIngestao()
    if not grupo.analitica:
        raise ValueError(f"{rotulo}: falta a planilha analítica")

    print(f"[INGESTAO] Analítica: {os.path.basename(grupo.analitica)}")
    mes = ingerir_analitica(ler_primeira_folha(grupo.analitica), RegistoMes.vazio(rotulo))

    if grupo.gerencial:
        print(f"[INGESTAO] Gerencial: {os.path.basename(grupo.gerencial)}")
        sem_match: List[str] = []
        enriquecer_gerencial(ler_primeira_folha(grupo.gerencial), mes, sem_match)
        if sem_match:
            relatorio.sem_match[rotulo] = sem_match
    else:
        relatorio.avisar(f"planilha gerencial não encontrada para {rotulo}. A usar horas padrão.")

    return mes.recalcular_totais()


def executar_ingestao(
    uploads_dir: str,
    dados: Dict[str, Any],
    relatorio: Optional[RelatorioIngestao] = None,
) -> Dict[str, Any]:
    """
    Processa todos os meses encontrados na pasta e faz upsert de cada um em
    `dados` (em memória). Não grava: isso fica para quem chama, uma única vez.
    """
    if relatorio is None:
        relatorio = RelatorioIngestao()

    ficheiros = listar_planilhas(uploads_dir)
    relatorio.ficheiros = [os.path.basename(f) for f in ficheiros]
    if not ficheiros:
        relatorio.avisar(f"nenhum ficheiro .xlsx encontrado em {uploads_dir}")
        return dados

    grupos = agrupar_ficheiros(ficheiros, relatorio.avisos)
    print(f"[INGESTAO] Grupos identificados: {list(grupos.keys())}")

    for rotulo, grupo in grupos.items():
        print(f"[INGESTAO] A processar mês: {rotulo}...")
        if not grupo.analitica:
            relatorio.avisar(f"planilha analítica não encontrada para {rotulo}. Mês ignorado.")
            relatorio.meses_ignorados.append(rotulo)
            continue

        registo = processar_mes(rotulo, grupo, relatorio)
        relatorio.meses[rotulo] = upsert_mes(dados, registo.to_dict())

    return dados


def ingerir_diretorio(
    uploads_dir: Optional[str] = None,
    data_file: Optional[str] = None,
) -> RelatorioIngestao:
    """Carrega o ficheiro de dados, processa a pasta e grava tudo no fim."""
    uploads_dir = uploads_dir or config.UPLOADS_DIR
    data_file = data_file or config.DATA_FILE
    os.makedirs(uploads_dir, exist_ok=True)

    print("[INGESTAO] A iniciar ingestão de dados...")
    relatorio = RelatorioIngestao()
    dados = carregar_dados(data_file)
    executar_ingestao(uploads_dir, dados, relatorio)

    if relatorio.ficheiros:
        guardar_dados(dados, data_file)
        relatorio.gravado = True
    print("[INGESTAO] Processo finalizado.")
    return relatorio


@router.post("/ingestao/importar")
async def importar_planilhas(ficheiros: List[UploadFile] = File(...)):
    """Recebe planilhas, guarda-as na pasta de uploads e corre a ingestão completa."""
    uploads_dir = config.UPLOADS_DIR
    os.makedirs(uploads_dir, exist_ok=True)

    recebidos: List[str] = []
    rejeitados: List[str] = []
    for ficheiro in ficheiros:
        nome = os.path.basename(ficheiro.filename or "")
        if not nome or not nome.lower().endswith(config.EXTENSOES_PLANILHA):
            rejeitados.append(nome or "sem_nome")
            continue
        conteudo = await ficheiro.read()
        with open(os.path.join(uploads_dir, nome), "wb") as f:
            f.write(conteudo)
        recebidos.append(nome)

    if not recebidos:
        raise HTTPException(status_code=400, detail="Nenhuma planilha .xlsx recebida.")

    try:
        relatorio = ingerir_diretorio(uploads_dir, config.DATA_FILE)
    except PlanilhaInvalidaError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except ArmazemInvalidoError as exc:
        raise HTTPException(status_code=500, detail=str(exc)) from exc

    resposta = relatorio.to_dict()
    resposta["recebidos"] = recebidos
    resposta["rejeitados"] = rejeitados
    return resposta


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        description="Ingestão das planilhas analítica/gerencial para o ficheiro de dados do painel"
    )
    parser.add_argument("--uploads", default=None, help=f"pasta das planilhas (omissão: {config.UPLOADS_DIR})")
    parser.add_argument("--dados", default=None, help=f"ficheiro JSON (omissão: {config.DATA_FILE})")
    args = parser.parse_args(argv)

    try:
        ingerir_diretorio(args.uploads, args.dados)
    except IngestaoError as exc:
        print(f"[INGESTAO] ERRO: {exc}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
