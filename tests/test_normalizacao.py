from datetime import date, datetime, time, timedelta

import pytest

from normalizacao import (
    canonicalizar_nome,
    data_para_texto,
    extrair_campos,
    limpar_nome_atividade,
    parse_horas_disponiveis,
)


@pytest.mark.parametrize("nome", ["Ana", "José  Çosta ", "  MARIA da  Conceição", ""])
def test_canonicalizar_idempotente_e_sem_maiusculas(nome):
    assert canonicalizar_nome(canonicalizar_nome(nome)) == canonicalizar_nome(nome)
    assert canonicalizar_nome(nome.upper()) == canonicalizar_nome(nome)


def test_canonicalizar_remove_acentos_e_espacos():
    assert canonicalizar_nome("José  Çosta ") == "jose costa"
    assert canonicalizar_nome("João\tGonçalves\n Alves") == "joao goncalves alves"


def test_canonicalizar_vazio():
    assert canonicalizar_nome(None) == ""
    assert canonicalizar_nome("") == ""
    assert canonicalizar_nome("   ") == ""


@pytest.mark.parametrize(
    "valor, esperado",
    [
        ("160h30min", 160.5),
        ("160:30", 160.5),
        ("160", 160),
        (160, 160),
        ("abc", 0),
        ("160h", 160),
        ("160H00MIN", 160),
        ("160,5", 160.5),
        (" 80 ", 80),
        (None, 0),
        ("", 0),
        ("xh30", 0.5),
    ],
)
def test_parse_horas_disponiveis(valor, esperado):
    assert parse_horas_disponiveis(valor) == pytest.approx(esperado)


def test_parse_horas_celulas_de_tempo():
    assert parse_horas_disponiveis(timedelta(hours=160, minutes=30)) == pytest.approx(160.5)
    assert parse_horas_disponiveis(time(8, 15)) == pytest.approx(8.25)
    assert parse_horas_disponiveis(True) == 0


def test_data_serial_excel():
    assert data_para_texto(1) == "31/12/1899"
    assert data_para_texto(2) == "01/01/1900"
    assert data_para_texto(45000) == "15/03/2023"
    assert data_para_texto(45000.75) == "15/03/2023"


def test_data_texto_e_vazio():
    assert data_para_texto("05/12/2024") == "05/12/2024"
    assert data_para_texto(None) == ""
    assert data_para_texto("") == ""
    assert data_para_texto(0) == ""
    assert data_para_texto(0.0) == ""


def test_data_objetos_datetime():
    assert data_para_texto(datetime(2024, 12, 5, 14, 30)) == "05/12/2024"
    assert data_para_texto(date(2024, 1, 9)) == "09/01/2024"


def test_extrair_campos_primeiro_alias_preenchido():
    colunas = [
        ("pessoa", ("Nome", "Colaborador")),
        ("minutos", ("Tempo lançado", "Time")),
        ("nucleo", ("Núcleo",)),
    ]
    linha = {"Nome": "  ", "COLABORADOR": " Ana ", "tempo lancado": 12, "Time": 99}
    campos = extrair_campos(linha, colunas)
    assert campos == {"pessoa": "Ana", "minutos": 12, "nucleo": None}


def test_limpar_nome_atividade():
    assert limpar_nome_atividade("12. Reunião de alinhamento") == "Reunião de alinhamento"
    assert limpar_nome_atividade("Audiência") == "Audiência"
    assert limpar_nome_atividade("[ADM] - Reunião de equipa") == "Reunião de equipa"
    assert limpar_nome_atividade("Parecer [urgente] final") == "Parecer final"
    assert limpar_nome_atividade("[X] 3. Minuta") == "Minuta"
    assert limpar_nome_atividade(None) == ""
