import argparse
import sys
from typing import Any, Dict, Iterable, List, Optional

from fastapi import APIRouter, HTTPException, Query
from fastapi.responses import RedirectResponse

import config
from analitica import _somar_lancamento
from dados import carregar_dados, encontrar_mes
from erros import IngestaoError
from modelos import Lancamento, RegistoMes, numero_json
from normalizacao import _para_float, canonicalizar_nome, limpar_nome_atividade

router = APIRouter()


# ========= HELPERS =========

def _format_minutos(minutos: float) -> str:
    """Converte minutos em 'XhYYm' (com sinal, o estoque pode ser negativo)."""
    total = int(round(minutos or 0))
    sinal = "-" if total < 0 else ""
    total = abs(total)
    return f"{sinal}{total // 60}h{total % 60:02d}m"


def _pct(parte: float, todo: float) -> float:
    if not todo:
        return 0.0
    return round(parte / todo * 100.0, 1)


def _media(soma: float, n: float) -> float:
    if not n:
        return 0.0
    return round(soma / n, 2)


def _indicadores(available: float, logged: float, fragment_time: float,
                 total_lag: float, lag_count: float) -> Dict[str, Any]:
    return {
        "available": numero_json(float(available)),
        "logged": numero_json(float(logged)),
        "estoque": numero_json(float(available - logged)),
        "utilizacao": _pct(logged, available),
        "fragmentPct": _pct(fragment_time, logged),
        "deepWork": numero_json(float(logged - fragment_time)),
        "lagMedio": _media(total_lag, lag_count),
    }


# ========= RESUMOS =========

def resumo_mes(mes: Dict[str, Any]) -> Dict[str, Any]:
    """
    Indicadores de um mês gravado: por pessoa e no total.
    estoque = disponível - lançado; utilização e % fragmentado em percentagem.
    """
    pessoas: List[Dict[str, Any]] = []
    tot = {"available": 0.0, "logged": 0.0, "fragmentTime": 0.0, "totalLag": 0.0,
           "lagCount": 0.0, "entries": 0, "fragments": 0}

    for p in (mes.get("byPerson") or {}).values():
        available = _para_float(p.get("available"))
        logged = _para_float(p.get("logged"))
        frag_time = _para_float(p.get("fragmentTime"))
        total_lag = _para_float(p.get("totalLag"))
        lag_count = _para_float(p.get("lagCount"))

        linha = {"name": p.get("name")}
        linha.update(_indicadores(available, logged, frag_time, total_lag, lag_count))
        linha["entries"] = int(p.get("entries") or 0)
        linha["fragments"] = int(p.get("fragments") or 0)
        pessoas.append(linha)

        tot["available"] += available
        tot["logged"] += logged
        tot["fragmentTime"] += frag_time
        tot["totalLag"] += total_lag
        tot["lagCount"] += lag_count
        tot["entries"] += linha["entries"]
        tot["fragments"] += linha["fragments"]

    pessoas.sort(key=lambda x: (-_para_float(x["logged"]), str(x["name"] or "").upper()))

    total = _indicadores(tot["available"], tot["logged"], tot["fragmentTime"],
                         tot["totalLag"], tot["lagCount"])
    total["entries"] = tot["entries"]
    total["fragments"] = tot["fragments"]

    clientes = sorted(
        (
            {
                "name": c.get("name"),
                "logged": c.get("logged", 0),
                "faturavel": bool(c.get("faturavel", True)),
            }
            for c in (mes.get("byClient") or {}).values()
        ),
        key=lambda x: -_para_float(x["logged"]),
    )
    nucleos = sorted(
        ({"name": n.get("name"), "logged": n.get("logged", 0)} for n in (mes.get("byNucleo") or {}).values()),
        key=lambda x: -_para_float(x["logged"]),
    )

    return {
        "id": mes.get("id"),
        "name": mes.get("name"),
        "total": total,
        "pessoas": pessoas,
        "clientes": clientes,
        "nucleos": nucleos,
    }


def _lancamento_de_dict(e: Dict[str, Any]) -> Lancamento:
    return Lancamento(
        pessoa=str(e.get("p") or ""),
        nucleo=str(e.get("n") or config.NUCLEO_PADRAO),
        cliente=str(e.get("c") or ""),
        evento=str(e.get("e") or ""),
        minutos=_para_float(e.get("t")),
        descricao=str(e.get("d") or ""),
        lag=_para_float(e.get("l")),
        data=str(e.get("dt") or ""),
    )


def filtrar_por_nucleos(mes: Dict[str, Any], nucleos: Iterable[str]) -> Dict[str, Any]:
    """
    Reconstrói o mês só com os lançamentos dos núcleos indicados (vista de um
    gestor). A disponibilidade das pessoas e o 'faturavel' dos clientes mantêm
    os valores gravados.
    """
    alvos = {canonicalizar_nome(n) for n in nucleos if n}
    novo = RegistoMes.vazio(mes.get("id") or mes.get("name") or "")
    novo.name = mes.get("name") or novo.id

    for e in mes.get("rawEntries") or []:
        if canonicalizar_nome(e.get("n") or config.NUCLEO_PADRAO) not in alvos:
            continue
        lanc = _lancamento_de_dict(e)
        novo.rawEntries.append(lanc)
        _somar_lancamento(novo, lanc)

    gravadas = mes.get("byPerson") or {}
    for nome, pessoa in novo.byPerson.items():
        if nome in gravadas:
            pessoa.available = _para_float(gravadas[nome].get("available"))

    clientes_gravados = mes.get("byClient") or {}
    for nome, cliente in novo.byClient.items():
        if nome in clientes_gravados:
            cliente.faturavel = bool(clientes_gravados[nome].get("faturavel", True))

    return novo.recalcular_totais().to_dict()


def _chave_pessoa(mes: Dict[str, Any], nome: str) -> Optional[str]:
    pessoas = mes.get("byPerson") or {}
    if nome in pessoas:
        return nome
    alvo = canonicalizar_nome(nome)
    for chave in pessoas:
        if canonicalizar_nome(chave) == alvo:
            return chave
    return None


def detalhe_pessoa(mes: Dict[str, Any], nome: str) -> Optional[Dict[str, Any]]:
    """Minutos de uma pessoa por cliente e por atividade (ordem decrescente)."""
    chave = _chave_pessoa(mes, nome)
    if chave is None:
        return None

    por_cliente: Dict[str, float] = {}
    por_atividade: Dict[str, float] = {}
    for e in mes.get("rawEntries") or []:
        if e.get("p") != chave:
            continue
        minutos = _para_float(e.get("t"))
        cliente = str(e.get("c") or "")
        atividade = limpar_nome_atividade(e.get("e")) or str(e.get("e") or "")
        por_cliente[cliente] = por_cliente.get(cliente, 0.0) + minutos
        por_atividade[atividade] = por_atividade.get(atividade, 0.0) + minutos

    clientes_mes = mes.get("byClient") or {}
    stat = (mes.get("byPerson") or {})[chave]

    return {
        "mes": mes.get("name"),
        "name": chave,
        "indicadores": _indicadores(
            _para_float(stat.get("available")),
            _para_float(stat.get("logged")),
            _para_float(stat.get("fragmentTime")),
            _para_float(stat.get("totalLag")),
            _para_float(stat.get("lagCount")),
        ),
        "porCliente": [
            {
                "name": c,
                "minutos": numero_json(m),
                "faturavel": bool((clientes_mes.get(c) or {}).get("faturavel", True)),
            }
            for c, m in sorted(por_cliente.items(), key=lambda kv: kv[1], reverse=True)
        ],
        "porAtividade": [
            {"name": a, "minutos": numero_json(m)}
            for a, m in sorted(por_atividade.items(), key=lambda kv: kv[1], reverse=True)
        ],
    }


# ========= API =========

def _carregar_mes(mes_id: str) -> Dict[str, Any]:
    try:
        dados = carregar_dados(config.DATA_FILE)
    except IngestaoError as exc:
        raise HTTPException(status_code=500, detail=str(exc)) from exc
    mes = encontrar_mes(dados, mes_id)
    if mes is None:
        raise HTTPException(status_code=404, detail=f"Mês não encontrado: {mes_id}")
    return mes


@router.get("/", include_in_schema=False)
async def raiz():
    return RedirectResponse(url="/meses")


@router.get("/meses")
async def listar_meses():
    try:
        dados = carregar_dados(config.DATA_FILE)
    except IngestaoError as exc:
        raise HTTPException(status_code=500, detail=str(exc)) from exc
    return [
        {
            "id": m.get("id"),
            "name": m.get("name"),
            "totalAvailable": m.get("totalAvailable", 0),
            "totalLogged": m.get("totalLogged", 0),
        }
        for m in dados.get("months", [])
        if isinstance(m, dict)
    ]


@router.get("/meses/{mes_id}/resumo")
async def ver_resumo_mes(mes_id: str, nucleo: Optional[List[str]] = Query(None)):
    mes = _carregar_mes(mes_id)
    if nucleo:
        mes = filtrar_por_nucleos(mes, nucleo)
    return resumo_mes(mes)


@router.get("/meses/{mes_id}/pessoas/{nome}")
async def ver_detalhe_pessoa(mes_id: str, nome: str):
    mes = _carregar_mes(mes_id)
    detalhe = detalhe_pessoa(mes, nome)
    if detalhe is None:
        raise HTTPException(status_code=404, detail=f"Pessoa não encontrada em {mes_id}: {nome}")
    return detalhe


# ========= CONSOLA =========

def imprimir_resumo(resumo: Dict[str, Any]) -> None:
    total = resumo["total"]
    print(f"\n[Resumo: {resumo['name']}]")
    print(
        f"Disponível: {_format_minutos(total['available'])} | "
        f"Lançado: {_format_minutos(total['logged'])} | "
        f"Estoque: {_format_minutos(total['estoque'])} | "
        f"Utilização: {total['utilizacao']:.1f}%"
    )
    print(f"Lançamentos: {total['entries']} | Fragmentado: {total['fragmentPct']:.1f}% | Lag médio: {total['lagMedio']:.2f} dias")

    print("\nPor pessoa:")
    for p in resumo["pessoas"]:
        print(
            f"  {p['name']}: {_format_minutos(p['logged'])} de {_format_minutos(p['available'])} "
            f"(estoque {_format_minutos(p['estoque'])}, {p['utilizacao']:.1f}%)"
        )

    print("\nPor cliente:")
    for c in resumo["clientes"]:
        marca = "" if c["faturavel"] else " [não faturável]"
        print(f"  {c['name']}: {_format_minutos(c['logged'])}{marca}")


def imprimir_detalhe(detalhe: Dict[str, Any]) -> None:
    print(f"\n--- Por Cliente ({detalhe['name']} / {detalhe['mes']}) ---")
    for c in detalhe["porCliente"]:
        print(f"{c['name']}: {c['minutos']} min ({_para_float(c['minutos']) / 60:.1f}h) [Faturável: {c['faturavel']}]")

    print(f"\n--- Por Atividade ({detalhe['name']} / {detalhe['mes']}) ---")
    for a in detalhe["porAtividade"]:
        print(f"{a['name']}: {a['minutos']} min ({_para_float(a['minutos']) / 60:.1f}h)")


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Relatórios de um mês já ingerido")
    parser.add_argument("mes", help="id ou nome do mês (ex.: Dezembro)")
    parser.add_argument("--pessoa", default=None, help="detalhe por cliente/atividade desta pessoa")
    parser.add_argument("--nucleo", action="append", default=None, help="filtrar por núcleo (pode repetir)")
    parser.add_argument("--dados", default=None, help=f"ficheiro JSON (omissão: {config.DATA_FILE})")
    args = parser.parse_args(argv)

    try:
        dados = carregar_dados(args.dados or config.DATA_FILE)
    except IngestaoError as exc:
        print(f"[RESUMO] ERRO: {exc}")
        return 1

    mes = encontrar_mes(dados, args.mes)
    if mes is None:
        print(f"[RESUMO] Mês não encontrado: {args.mes}")
        return 1
    if args.nucleo:
        mes = filtrar_por_nucleos(mes, args.nucleo)

    if args.pessoa:
        detalhe = detalhe_pessoa(mes, args.pessoa)
        if detalhe is None:
            print(f"[RESUMO] Pessoa não encontrada em {mes.get('name')}: {args.pessoa}")
            return 1
        imprimir_detalhe(detalhe)
    else:
        imprimir_resumo(resumo_mes(mes))
    return 0


if __name__ == "__main__":
    sys.exit(main())
