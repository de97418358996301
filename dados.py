import json
import os
from typing import Any, Dict, Optional

import config
from erros import ArmazemInvalidoError
from normalizacao import canonicalizar_nome


def dados_vazios() -> Dict[str, Any]:
    return {"months": []}


def carregar_dados(caminho: Optional[str] = None) -> Dict[str, Any]:
    """
    Lê o ficheiro de dados ({"months": [...]}).
    Ficheiro inexistente -> estrutura vazia.
    Ficheiro que não é JSON (ou não é um objeto) -> ArmazemInvalidoError:
    não se arrisca gravar por cima de dados que não se conseguiram ler.
    """
    caminho = caminho or config.DATA_FILE
    print(f"[DADOS] carregar_dados() -> DATA_FILE = {os.path.abspath(caminho)}")

    if not os.path.exists(caminho):
        print("[DADOS] Ficheiro não existe, a iniciar estado vazio.")
        return dados_vazios()

    try:
        with open(caminho, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise ArmazemInvalidoError(f"{caminho} não é um JSON válido: {exc}") from exc

    if not isinstance(data, dict):
        raise ArmazemInvalidoError(f"{caminho} não contém um objeto JSON")

    meses = data.get("months")
    if meses is None:
        data["months"] = []
    elif not isinstance(meses, list):
        raise ArmazemInvalidoError(f"{caminho}: 'months' não é uma lista")

    print(f"[DADOS] Leitura OK ({len(data['months'])} meses).")
    return data


def guardar_dados(dados: Dict[str, Any], caminho: Optional[str] = None) -> None:
    """
    Grava o documento inteiro de uma vez.
    Usa ficheiro temporário + os.replace para não deixar ficheiro corrompido.
    """
    caminho = caminho or config.DATA_FILE
    pasta = os.path.dirname(os.path.abspath(caminho))
    os.makedirs(pasta, exist_ok=True)

    tmp_file = caminho + ".tmp"
    print(
        f"[DADOS] guardar_dados() -> a escrever em {os.path.abspath(caminho)} "
        f"(meses: {len(dados.get('months', []))})"
    )
    try:
        with open(tmp_file, "w", encoding="utf-8") as f:
            json.dump(dados, f, ensure_ascii=False, indent=2)
        os.replace(tmp_file, caminho)
    except OSError:
        if os.path.exists(tmp_file):
            os.remove(tmp_file)
        raise
    print("[DADOS] Guardado com sucesso.")


def _indice_mes(dados: Dict[str, Any], rotulo: str) -> int:
    """
    Posição do mês já gravado que corresponde a `rotulo`, ou -1.
    Primeiro id/name exatos; depois id/name que contenham o rótulo,
    comparando nomes canónicos (assim "Marco" antigo ainda bate com "Março").
    """
    meses = dados.get("months", [])

    for i, m in enumerate(meses):
        if not isinstance(m, dict):
            continue
        if m.get("id") == rotulo or m.get("name") == rotulo:
            return i

    alvo = canonicalizar_nome(rotulo)
    if not alvo:
        return -1
    for i, m in enumerate(meses):
        if not isinstance(m, dict):
            continue
        if alvo in canonicalizar_nome(m.get("id")) or alvo in canonicalizar_nome(m.get("name")):
            return i
    return -1


def upsert_mes(dados: Dict[str, Any], registo: Dict[str, Any]) -> str:
    """
    Substitui o mês existente (mesmo rótulo) ou acrescenta no fim.
    Devolve "atualizado" ou "inserido".
    """
    meses = dados.setdefault("months", [])
    idx = _indice_mes(dados, registo["id"])
    if idx >= 0:
        print(f"[DADOS] A atualizar mês existente: {meses[idx].get('name')}")
        meses[idx] = registo
        return "atualizado"

    print(f"[DADOS] A inserir novo mês: {registo['name']}")
    meses.append(registo)
    return "inserido"


def encontrar_mes(dados: Dict[str, Any], mes_id: str) -> Optional[Dict[str, Any]]:
    """Mês gravado com este id/nome (comparação sem acentos nem maiúsculas)."""
    alvo = canonicalizar_nome(mes_id)
    for m in dados.get("months", []):
        if not isinstance(m, dict):
            continue
        if m.get("id") == mes_id or m.get("name") == mes_id:
            return m
    for m in dados.get("months", []):
        if not isinstance(m, dict):
            continue
        if alvo and alvo in (canonicalizar_nome(m.get("id")), canonicalizar_nome(m.get("name"))):
            return m
    return None
