import argparse
import os
import sys
from typing import Any, Dict, List, Optional
from zipfile import BadZipFile

import openpyxl  # pip install openpyxl
from openpyxl.utils.exceptions import InvalidFileException

from erros import PlanilhaInvalidaError


# ParseError do ElementTree (e o XMLSyntaxError do lxml) são SyntaxError
_ERROS_LEITURA = (InvalidFileException, BadZipFile, KeyError, OSError, ValueError, SyntaxError)


def _linha_vazia(row) -> bool:
    for v in row:
        if v is None:
            continue
        if isinstance(v, str) and not v.strip():
            continue
        return False
    return True


def _ler_linhas(sheet) -> List[Dict[str, Any]]:
    cabecalho: Optional[List[Optional[str]]] = None
    linhas: List[Dict[str, Any]] = []

    for row in sheet.iter_rows(values_only=True):
        if not row or _linha_vazia(row):
            continue

        if cabecalho is None:
            cabecalho = [
                str(c).strip() if c is not None and str(c).strip() else None
                for c in row
            ]
            continue

        registo: Dict[str, Any] = {}
        for header, valor in zip(cabecalho, row):
            if header is None or valor is None:
                continue
            if isinstance(valor, str) and not valor.strip():
                continue
            registo.setdefault(header, valor)
        if registo:
            linhas.append(registo)

    return linhas


def ler_primeira_folha(caminho: str) -> List[Dict[str, Any]]:
    """
    Lê a PRIMEIRA folha de um Excel e devolve uma lista de dicionários
    {cabeçalho: valor}, um por linha de dados.

    - a primeira linha não vazia é o cabeçalho
    - linhas totalmente vazias são ignoradas
    - células vazias não entram no dicionário
    Ficheiro ilegível, sem folhas ou com XML corrompido -> PlanilhaInvalidaError.
    """
    try:
        wb = openpyxl.load_workbook(caminho, read_only=True, data_only=True)
    except _ERROS_LEITURA as exc:
        raise PlanilhaInvalidaError(caminho, f"não foi possível abrir ({exc})") from exc

    try:
        if not wb.sheetnames:
            raise PlanilhaInvalidaError(caminho, "o ficheiro não tem folhas")
        # em read_only a folha só é lida (e validada) durante iter_rows
        return _ler_linhas(wb.worksheets[0])
    except _ERROS_LEITURA as exc:
        raise PlanilhaInvalidaError(caminho, f"não foi possível ler a folha ({exc})") from exc
    finally:
        wb.close()


def main(argv: Optional[List[str]] = None) -> int:
    """Mostra o cabeçalho e as primeiras linhas de uma planilha (para afinar aliases)."""
    parser = argparse.ArgumentParser(description="Inspecionar a primeira folha de um Excel")
    parser.add_argument("ficheiro")
    parser.add_argument("-n", "--linhas", type=int, default=5)
    args = parser.parse_args(argv)

    try:
        linhas = ler_primeira_folha(args.ficheiro)
    except PlanilhaInvalidaError as exc:
        print(f"[PLANILHAS] ERRO: {exc}")
        return 1

    headers: List[str] = []
    for linha in linhas:
        for h in linha:
            if h not in headers:
                headers.append(h)

    print(f"[PLANILHAS] {os.path.basename(args.ficheiro)}: {len(linhas)} linhas")
    print(f"[PLANILHAS] Colunas: {headers}")
    for i, linha in enumerate(linhas[: max(args.linhas, 0)], start=1):
        print(f"  {i}: {linha}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
