import argparse
import sys
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, HTTPException

import config
from dados import carregar_dados, encontrar_mes
from erros import IngestaoError
from modelos import numero_json
from normalizacao import _para_float, canonicalizar_nome, limpar_nome_atividade
from resumo import _format_minutos, _pct

router = APIRouter()

TOP_COLABORADORES = 8
TOP_ATIVIDADES = 8


def _meses(dados: Dict[str, Any]) -> List[Dict[str, Any]]:
    return [m for m in dados.get("months", []) if isinstance(m, dict)]


def _chave_cliente(meses: List[Dict[str, Any]], nome: str) -> Optional[str]:
    """Nome do cliente tal como foi gravado (exato primeiro, depois sem acentos)."""
    nomes: List[str] = []
    for m in meses:
        for c in (m.get("byClient") or {}):
            if c not in nomes:
                nomes.append(c)
    if nome in nomes:
        return nome
    alvo = canonicalizar_nome(nome)
    for c in nomes:
        if alvo and canonicalizar_nome(c) == alvo:
            return c
    return None


def _somar_por(entries: List[Dict[str, Any]], chave) -> Dict[str, float]:
    soma: Dict[str, float] = {}
    for e in entries:
        k = chave(e)
        soma[k] = soma.get(k, 0.0) + _para_float(e.get("t"))
    return soma


def _ranking(soma: Dict[str, float], limite: int) -> List[Dict[str, Any]]:
    ordenado = sorted(soma.items(), key=lambda kv: kv[1], reverse=True)[:limite]
    return [{"name": k, "minutos": numero_json(v)} for k, v in ordenado]


def _risco(top1: float) -> str:
    if top1 > 60:
        return "Alta Dependência"
    if top1 > 40:
        return "Concentrado"
    return "Diversificado"


def detalhe_cliente(dados: Dict[str, Any], nome: str,
                    mes_id: Optional[str] = None) -> Optional[Dict[str, Any]]:
    """
    Visão de um cliente a partir dos lançamentos gravados.

    Com `mes_id` os indicadores olham só para esse mês; sem ele, para todos.
    A evolução mensal cobre sempre todos os meses. Cliente que não aparece em
    nenhum mês -> None.
    """
    meses = _meses(dados)
    chave = _chave_cliente(meses, nome)
    if chave is None:
        return None

    if mes_id is None:
        relevantes = meses
    else:
        mes = encontrar_mes(dados, mes_id)
        relevantes = [mes] if mes is not None else []

    entries: List[Dict[str, Any]] = []
    total_escritorio = 0.0
    for m in relevantes:
        for e in m.get("rawEntries") or []:
            total_escritorio += _para_float(e.get("t"))
            if e.get("c") == chave:
                entries.append(e)

    minutos = sum(_para_float(e.get("t")) for e in entries)
    por_pessoa = _somar_por(entries, lambda e: str(e.get("p") or ""))
    por_atividade = _somar_por(
        entries, lambda e: limpar_nome_atividade(e.get("e")) or str(e.get("e") or "")
    )

    pessoas = sorted(por_pessoa.items(), key=lambda kv: kv[1], reverse=True)
    top1 = _pct(pessoas[0][1], minutos) if pessoas else 0.0
    top3 = _pct(sum(v for _, v in pessoas[:3]), minutos) if pessoas else 0.0

    # o 'faturavel' gravado mais recente manda
    faturavel = True
    for m in meses:
        gravado = (m.get("byClient") or {}).get(chave)
        if gravado is not None:
            faturavel = bool(gravado.get("faturavel", True))

    evolucao = []
    for m in meses:
        soma = sum(_para_float(e.get("t")) for e in m.get("rawEntries") or [] if e.get("c") == chave)
        evolucao.append({"mes": m.get("name"), "minutos": numero_json(soma)})

    return {
        "name": chave,
        "mes": relevantes[0].get("name") if mes_id is not None and relevantes else None,
        "faturavel": faturavel,
        "minutos": numero_json(minutos),
        "share": _pct(minutos, total_escritorio),
        "equipa": len(por_pessoa),
        "entries": len(entries),
        "topColaboradores": _ranking(por_pessoa, TOP_COLABORADORES),
        "perfilDemanda": _ranking(por_atividade, TOP_ATIVIDADES),
        "evolucao": evolucao,
        "concentracao": {
            "top1Share": top1,
            "top3Share": top3,
            "topPerson": pessoas[0][0] if pessoas else "-",
            "risco": _risco(top1),
            "totalPessoas": len(por_pessoa),
        },
    }


# ========= API =========

def _carregar_dados() -> Dict[str, Any]:
    try:
        return carregar_dados(config.DATA_FILE)
    except IngestaoError as exc:
        raise HTTPException(status_code=500, detail=str(exc)) from exc


@router.get("/clientes/{nome}")
async def ver_cliente(nome: str):
    detalhe = detalhe_cliente(_carregar_dados(), nome)
    if detalhe is None:
        raise HTTPException(status_code=404, detail=f"Cliente não encontrado: {nome}")
    return detalhe


@router.get("/meses/{mes_id}/clientes/{nome}")
async def ver_cliente_no_mes(mes_id: str, nome: str):
    dados = _carregar_dados()
    if encontrar_mes(dados, mes_id) is None:
        raise HTTPException(status_code=404, detail=f"Mês não encontrado: {mes_id}")
    detalhe = detalhe_cliente(dados, nome, mes_id)
    if detalhe is None:
        raise HTTPException(status_code=404, detail=f"Cliente não encontrado: {nome}")
    return detalhe


# ========= CONSOLA =========

def imprimir_cliente(detalhe: Dict[str, Any]) -> None:
    periodo = detalhe["mes"] or "todos os meses"
    marca = "" if detalhe["faturavel"] else " [não faturável]"
    print(f"\n[Cliente: {detalhe['name']} / {periodo}]{marca}")
    print(
        f"Horas: {_format_minutos(detalhe['minutos'])} | Share: {detalhe['share']:.1f}% | "
        f"Equipa: {detalhe['equipa']} | Lançamentos: {detalhe['entries']}"
    )
    conc = detalhe["concentracao"]
    print(
        f"Concentração: {conc['risco']} (top 1: {conc['topPerson']} {conc['top1Share']:.1f}%, "
        f"top 3: {conc['top3Share']:.1f}%)"
    )

    print("\nTop colaboradores:")
    for p in detalhe["topColaboradores"]:
        print(f"  {p['name']}: {_format_minutos(p['minutos'])}")

    print("\nPerfil de demanda:")
    for a in detalhe["perfilDemanda"]:
        print(f"  {a['name']}: {_format_minutos(a['minutos'])}")

    print("\nEvolução:")
    for m in detalhe["evolucao"]:
        print(f"  {m['mes']}: {_format_minutos(m['minutos'])}")


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Visão de um cliente nos meses ingeridos")
    parser.add_argument("cliente")
    parser.add_argument("--mes", default=None, help="limitar os indicadores a um mês")
    parser.add_argument("--dados", default=None, help=f"ficheiro JSON (omissão: {config.DATA_FILE})")
    args = parser.parse_args(argv)

    try:
        dados = carregar_dados(args.dados or config.DATA_FILE)
    except IngestaoError as exc:
        print(f"[CLIENTES] ERRO: {exc}")
        return 1

    if args.mes and encontrar_mes(dados, args.mes) is None:
        print(f"[CLIENTES] Mês não encontrado: {args.mes}")
        return 1
    detalhe = detalhe_cliente(dados, args.cliente, args.mes)
    if detalhe is None:
        print(f"[CLIENTES] Cliente não encontrado: {args.cliente}")
        return 1

    imprimir_cliente(detalhe)
    return 0


if __name__ == "__main__":
    sys.exit(main())
