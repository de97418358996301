import os
import zipfile
from io import BytesIO

import pytest
from openpyxl import Workbook

import config

HEADERS_ANALITICA = [
    "Nome",
    "Cliente",
    "Núcleo",
    "Descrição do evento",
    "Tempo lançado",
    "Descrição da atividade",
    "Lançamento para",
    "Lag",
]

HEADERS_GERENCIAL = ["Nome", "Tempo disponível"]


def _workbook(headers, linhas) -> Workbook:
    wb = Workbook()
    ws = wb.active
    ws.title = "Dados"
    ws.append(list(headers))
    for linha in linhas:
        ws.append(list(linha))
    return wb


def criar_planilha(caminho, headers, linhas) -> str:
    """Grava um .xlsx simples (cabeçalho + linhas) e devolve o caminho."""
    _workbook(headers, linhas).save(caminho)
    return str(caminho)


def planilha_bytes(headers, linhas) -> bytes:
    buf = BytesIO()
    _workbook(headers, linhas).save(buf)
    return buf.getvalue()


@pytest.fixture
def pastas(tmp_path, monkeypatch):
    """Pasta de uploads e ficheiro de dados isolados por teste."""
    uploads = tmp_path / "uploads"
    uploads.mkdir()
    data_file = tmp_path / "data" / "data.json"
    monkeypatch.setattr(config, "UPLOADS_DIR", str(uploads))
    monkeypatch.setattr(config, "DATA_FILE", str(data_file))
    return uploads, data_file


@pytest.fixture
def dezembro(pastas):
    """Par analítica/gerencial de Dezembro na pasta de uploads."""
    uploads, _ = pastas
    criar_planilha(
        os.path.join(uploads, "Analitico - Dezembro.xlsx"),
        HEADERS_ANALITICA,
        [
            ("Ana Maria Silva", "Cliente X", "Contencioso", "1. Audiência", 30, "Prep", 45630, 2),
            ("Ana Maria Silva", "Cliente X", "Contencioso", "Email", 5, None, 45631, 0),
            ("Bruno Gobbi", "Cliente Y", None, "Reunião", 60, "Alinhamento", "05/12/2024", 1),
            (None, "Cliente Z", "Contratos", "Sem dono", 15, None, None, None),
        ],
    )
    criar_planilha(
        os.path.join(uploads, "Gerencial - Dezembro.xlsx"),
        HEADERS_GERENCIAL,
        [
            ("Ana Maria", "160h00min"),
            ("Carlos Pereira", "120:00"),
            ("Bruno Gobbi", 0),
        ],
    )
    return pastas


def truncar_folha(caminho) -> str:
    """Corta a meio o XML da primeira folha, mantendo o resto do .xlsx válido."""
    caminho = str(caminho)
    with zipfile.ZipFile(caminho) as zin:
        partes = [(info, zin.read(info.filename)) for info in zin.infolist()]
    with zipfile.ZipFile(caminho, "w", zipfile.ZIP_DEFLATED) as zout:
        for info, conteudo in partes:
            if info.filename == "xl/worksheets/sheet1.xml":
                conteudo = conteudo[: len(conteudo) // 2]
            zout.writestr(info, conteudo)
    return caminho
