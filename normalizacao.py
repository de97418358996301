import math
import re
import unicodedata
from datetime import date, datetime, time, timedelta
from typing import Any, Dict, Iterable, Optional, Sequence, Tuple

from openpyxl.utils.datetime import to_excel

# Dia 0 das datas seriais do Excel (inclui o bug do ano bissexto de 1900)
EPOCA_EXCEL = datetime(1899, 12, 30)

_NUMERO_INICIAL = re.compile(r"^\s*([+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?)")
_ETIQUETA_ATIVIDADE = re.compile(r"\[.*?\]\s*-?\s*")


# ========= NOMES =========

def _remover_acentos(s: str) -> str:
    s = unicodedata.normalize("NFD", s)
    return "".join(ch for ch in s if unicodedata.category(ch) != "Mn")


def canonicalizar_nome(nome: Optional[str]) -> str:
    """
    Chave comparável para nomes de pessoas:
      - minúsculas
      - sem acentos (NFD + remoção das marcas combinantes)
      - espaços múltiplos comprimidos num só
      - strip
    """
    if not nome:
        return ""
    s = _remover_acentos(str(nome).lower())
    s = re.sub(r"\s+", " ", s)
    return s.strip()


def _normalize_header(value: Any) -> str:
    """Normaliza cabeçalhos de Excel para comparação case-insensitive sem acentos."""
    if value is None:
        return ""
    s = str(value).strip()
    if not s:
        return ""
    s = _remover_acentos(s).lower()
    s = re.sub(r"[^a-z0-9]+", " ", s)
    return s.strip()


def limpar_nome_atividade(nome: Optional[str]) -> str:
    """
    Nome de atividade para agrupar:
      - tira as etiquetas entre parêntesis retos ("[ADM] - Reunião" -> "Reunião")
      - tira a numeração inicial ("12. Reunião" -> "Reunião")
    """
    if not nome:
        return ""
    s = _ETIQUETA_ATIVIDADE.sub("", str(nome)).strip()
    return re.sub(r"^[0-9]+\.\s*", "", s).strip()


# ========= NÚMEROS / TEMPOS =========

def _numero_inicial(texto: Any) -> float:
    """Lê o número no início do texto (à maneira de um parseFloat); 0 se não houver."""
    if texto is None:
        return 0.0
    m = _NUMERO_INICIAL.match(str(texto).replace(",", "."))
    if not m:
        return 0.0
    try:
        valor = float(m.group(1))
    except ValueError:
        return 0.0
    if math.isnan(valor) or math.isinf(valor):
        return 0.0
    return valor


def _para_float(valor: Any) -> float:
    """Converte uma célula em float; qualquer coisa ilegível vale 0."""
    if valor is None or isinstance(valor, bool):
        return 0.0
    if isinstance(valor, (int, float)):
        valor = float(valor)
        if math.isnan(valor) or math.isinf(valor):
            return 0.0
        return valor
    return _numero_inicial(valor)


def parse_horas_disponiveis(valor: Any) -> float:
    """
    Interpreta a célula de horas disponíveis da gerencial e devolve HORAS.

    Formatos aceites:
      - número (célula numérica do Excel) -> horas
      - timedelta / time (células formatadas [h]:mm)
      - "160h00min", "160h", "160h30"
      - "160:30"
      - "160", "160,5"
    Nunca lança exceção: o que não se consegue ler conta como 0.
    """
    if valor is None or isinstance(valor, bool):
        return 0.0

    if isinstance(valor, timedelta):
        return valor.total_seconds() / 3600.0
    if isinstance(valor, datetime):
        # [h]:mm sem parêntesis chega como datetime perto de 1900
        return float(to_excel(valor)) * 24.0
    if isinstance(valor, time):
        return valor.hour + valor.minute / 60.0 + valor.second / 3600.0
    if isinstance(valor, (int, float)):
        return _para_float(valor)

    s = str(valor).strip().lower()
    if not s:
        return 0.0

    if "h" in s:
        partes = s.replace("min", "").split("h")
        horas = _numero_inicial(partes[0])
        minutos = _numero_inicial(partes[1]) if len(partes) > 1 else 0.0
        return horas + minutos / 60.0

    if ":" in s:
        partes = s.split(":")
        horas = _numero_inicial(partes[0])
        minutos = _numero_inicial(partes[1]) if len(partes) > 1 else 0.0
        return horas + minutos / 60.0

    return _numero_inicial(s)


# ========= DATAS =========

def data_para_texto(valor: Any) -> str:
    """
    Converte a data de um lançamento para "DD/MM/AAAA".

    Serial numérico do Excel -> dia 0 = 30/12/1899 (serial 1 = 31/12/1899).
    O serial 0 conta como data por preencher e devolve "".
    datetime/date (células já formatadas como data pelo openpyxl) -> formatado.
    Texto -> devolvido tal como está.
    """
    if valor is None or valor == "" or (valor == 0 and not isinstance(valor, bool)):
        return ""

    if isinstance(valor, datetime):
        dia = valor
    elif isinstance(valor, date):
        dia = datetime(valor.year, valor.month, valor.day)
    elif isinstance(valor, (int, float)) and not isinstance(valor, bool):
        try:
            dia = EPOCA_EXCEL + timedelta(days=float(valor))
        except (OverflowError, ValueError):
            return str(valor)
    else:
        return str(valor)

    return f"{dia.day:02d}/{dia.month:02d}/{dia.year:04d}"


# ========= COLUNAS =========

def _vazio(valor: Any) -> bool:
    if valor is None:
        return True
    if isinstance(valor, str) and not valor.strip():
        return True
    return False


def extrair_campos(
    linha: Dict[str, Any],
    colunas: Sequence[Tuple[str, Iterable[str]]],
) -> Dict[str, Any]:
    """
    Extrai os campos lógicos de uma linha da planilha.

    `colunas` é uma lista ordenada de (campo, (alias1, alias2, ...)); para cada
    campo ganha o primeiro alias com valor não vazio. Os cabeçalhos são
    comparados sem acentos e sem distinção de maiúsculas. Campos sem valor
    ficam a None. Textos vêm já com strip().
    """
    por_header: Dict[str, Any] = {}
    for header, valor in linha.items():
        chave = _normalize_header(header)
        if chave and chave not in por_header:
            por_header[chave] = valor

    campos: Dict[str, Any] = {}
    for campo, aliases in colunas:
        encontrado = None
        for alias in aliases:
            valor = por_header.get(_normalize_header(alias))
            if _vazio(valor):
                continue
            encontrado = valor.strip() if isinstance(valor, str) else valor
            break
        campos[campo] = encontrado
    return campos
