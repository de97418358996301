import argparse
import sys
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, HTTPException, Query

import config
from dados import carregar_dados, encontrar_mes
from erros import IngestaoError
from modelos import numero_json
from normalizacao import _para_float, canonicalizar_nome, limpar_nome_atividade
from resumo import _format_minutos, _media, _pct

router = APIRouter()

MESES_POR_OMISSAO = 3
TOP_COLABORADORES = 10
TOP_ATIVIDADES = 10


def _ranking(soma: Dict[str, float], limite: Optional[int] = None) -> List[Dict[str, Any]]:
    ordenado = sorted(soma.items(), key=lambda kv: kv[1], reverse=True)
    if limite is not None:
        ordenado = ordenado[:limite]
    return [{"name": k, "minutos": numero_json(v)} for k, v in ordenado]


def metricas_mes(mes: Dict[str, Any], nucleo: Optional[str] = None) -> Dict[str, Any]:
    """
    Métricas de um mês para pôr lado a lado com outros.

    Com `nucleo` só contam os lançamentos desse núcleo; o lag médio usa os
    acumulados das pessoas com pelo menos um lançamento no núcleo.
    Fragmentação = % de lançamentos abaixo de LIMITE_FRAGMENTO_MINUTOS.
    """
    entries = mes.get("rawEntries") or []
    if nucleo:
        alvo = canonicalizar_nome(nucleo)
        entries = [e for e in entries if canonicalizar_nome(e.get("n") or config.NUCLEO_PADRAO) == alvo]

    minutos = 0.0
    fragmentos = 0
    por_pessoa: Dict[str, float] = {}
    por_nucleo: Dict[str, float] = {}
    por_atividade: Dict[str, float] = {}
    for e in entries:
        t = _para_float(e.get("t"))
        minutos += t
        if t < config.LIMITE_FRAGMENTO_MINUTOS:
            fragmentos += 1
        pessoa = str(e.get("p") or "")
        nuc = str(e.get("n") or config.NUCLEO_PADRAO)
        atividade = limpar_nome_atividade(e.get("e")) or str(e.get("e") or "")
        por_pessoa[pessoa] = por_pessoa.get(pessoa, 0.0) + t
        por_nucleo[nuc] = por_nucleo.get(nuc, 0.0) + t
        por_atividade[atividade] = por_atividade.get(atividade, 0.0) + t

    pessoas = mes.get("byPerson") or {}
    if nucleo:
        pessoas = {k: v for k, v in pessoas.items() if k in por_pessoa}
    total_lag = 0.0
    lag_count = 0.0
    for p in pessoas.values():
        if _para_float(p.get("lagCount")):
            total_lag += _para_float(p.get("totalLag"))
            lag_count += _para_float(p.get("lagCount"))

    colaboradores = len(por_pessoa)
    return {
        "id": mes.get("id"),
        "name": mes.get("name"),
        "minutos": numero_json(minutos),
        "horas": round(minutos / 60.0, 2),
        "colaboradores": colaboradores,
        "mediaHorasPessoa": _media(minutos / 60.0, colaboradores),
        "taxaFragmentacao": _pct(fragmentos, len(entries)),
        "lagMedio": _media(total_lag, lag_count),
        "porNucleo": _ranking(por_nucleo),
        "topColaboradores": _ranking(por_pessoa, TOP_COLABORADORES),
        "topAtividades": _ranking(por_atividade, TOP_ATIVIDADES),
    }


def comparar_meses(meses: List[Dict[str, Any]], nucleo: Optional[str] = None) -> Dict[str, Any]:
    return {
        "nucleo": nucleo or None,
        "meses": [metricas_mes(m, nucleo) for m in meses],
    }


def selecionar_meses(dados: Dict[str, Any], mes_ids: Optional[List[str]] = None) -> List[Dict[str, Any]]:
    """
    Meses pedidos, pela ordem pedida. Sem ids -> os últimos MESES_POR_OMISSAO.
    Id desconhecido -> KeyError com esse id.
    """
    if not mes_ids:
        meses = [m for m in dados.get("months", []) if isinstance(m, dict)]
        return meses[-MESES_POR_OMISSAO:]

    escolhidos: List[Dict[str, Any]] = []
    for mes_id in mes_ids:
        mes = encontrar_mes(dados, mes_id)
        if mes is None:
            raise KeyError(mes_id)
        if mes not in escolhidos:
            escolhidos.append(mes)
    return escolhidos


# ========= API =========

@router.get("/comparacao")
async def ver_comparacao(mes: Optional[List[str]] = Query(None), nucleo: Optional[str] = None):
    try:
        dados = carregar_dados(config.DATA_FILE)
    except IngestaoError as exc:
        raise HTTPException(status_code=500, detail=str(exc)) from exc
    try:
        meses = selecionar_meses(dados, mes)
    except KeyError as exc:
        raise HTTPException(status_code=404, detail=f"Mês não encontrado: {exc.args[0]}") from exc
    return comparar_meses(meses, nucleo)


# ========= CONSOLA =========

def imprimir_comparacao(comparacao: Dict[str, Any]) -> None:
    filtro = f" (núcleo {comparacao['nucleo']})" if comparacao["nucleo"] else ""
    print(f"\n[Comparação{filtro}]")
    for m in comparacao["meses"]:
        print(
            f"  {m['name']}: {_format_minutos(m['minutos'])} | {m['colaboradores']} colaboradores | "
            f"{m['mediaHorasPessoa']:.2f}h/pessoa | fragmentação {m['taxaFragmentacao']:.1f}% | "
            f"lag médio {m['lagMedio']:.2f} dias"
        )


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Comparar meses já ingeridos")
    parser.add_argument("meses", nargs="*", help=f"ids ou nomes (omissão: últimos {MESES_POR_OMISSAO})")
    parser.add_argument("--nucleo", default=None, help="só os lançamentos deste núcleo")
    parser.add_argument("--dados", default=None, help=f"ficheiro JSON (omissão: {config.DATA_FILE})")
    args = parser.parse_args(argv)

    try:
        dados = carregar_dados(args.dados or config.DATA_FILE)
    except IngestaoError as exc:
        print(f"[COMPARACAO] ERRO: {exc}")
        return 1

    try:
        meses = selecionar_meses(dados, args.meses)
    except KeyError as exc:
        print(f"[COMPARACAO] Mês não encontrado: {exc.args[0]}")
        return 1

    imprimir_comparacao(comparar_meses(meses, args.nucleo))
    return 0


if __name__ == "__main__":
    sys.exit(main())
