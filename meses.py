import os
import unicodedata
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional

# Ordem de procura no nome do ficheiro; "marco" é a grafia sem cedilha.
MESES_NOMES = [
    "janeiro",
    "fevereiro",
    "março",
    "marco",
    "abril",
    "maio",
    "junho",
    "julho",
    "agosto",
    "setembro",
    "outubro",
    "novembro",
    "dezembro",
]

MESES_VARIANTES = {"marco": "março"}

KEYWORDS_GERENCIAL = ("gerencial", "meta", "disponi", "managerial")


@dataclass
class GrupoMes:
    """Par de ficheiros de um mês (qualquer um pode faltar)."""

    analitica: Optional[str] = None
    gerencial: Optional[str] = None


def _nome_limpo(ficheiro: str) -> str:
    base = os.path.basename(ficheiro)
    base = unicodedata.normalize("NFC", base)
    return os.path.splitext(base)[0].lower().strip()


def detetar_mes(ficheiro: str) -> Optional[str]:
    """Devolve o rótulo do mês ("Dezembro", "Março", ...) ou None."""
    limpo = _nome_limpo(ficheiro)
    for mes in MESES_NOMES:
        if mes in limpo:
            mes = MESES_VARIANTES.get(mes, mes)
            return mes[0].upper() + mes[1:]
    return None


def detetar_tipo(ficheiro: str) -> str:
    """'gerencial' se o nome tiver alguma keyword de metas/disponibilidade; senão 'analitica'."""
    limpo = _nome_limpo(ficheiro)
    if any(kw in limpo for kw in KEYWORDS_GERENCIAL):
        return "gerencial"
    return "analitica"


def agrupar_ficheiros(
    ficheiros: Iterable[str],
    avisos: Optional[List[str]] = None,
) -> Dict[str, GrupoMes]:
    """
    Agrupa os ficheiros por mês: {"Dezembro": GrupoMes(analitica=..., gerencial=...)}.

    Ficheiros sem mês no nome ficam de fora (com aviso). Se aparecerem dois
    ficheiros para o mesmo mês/tipo, fica o último (com aviso).
    A ordem do dicionário é a ordem em que os meses aparecem.
    """
    grupos: Dict[str, GrupoMes] = {}

    def avisar(msg: str) -> None:
        print(f"[MESES] WARNING: {msg}")
        if avisos is not None:
            avisos.append(msg)

    for ficheiro in ficheiros:
        nome = os.path.basename(ficheiro)
        rotulo = detetar_mes(nome)
        if not rotulo:
            avisar(f"ficheiro ignorado (sem mês no nome): {nome}")
            continue

        grupo = grupos.setdefault(rotulo, GrupoMes())

        if detetar_tipo(nome) == "gerencial":
            if grupo.gerencial:
                avisar(f"vários ficheiros gerenciais para {rotulo}. A usar: {nome}")
            grupo.gerencial = ficheiro
        else:
            if grupo.analitica:
                avisar(f"vários ficheiros analíticos para {rotulo}. A usar: {nome}")
            grupo.analitica = ficheiro

    return grupos
