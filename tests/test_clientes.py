import json

import pytest

from clientes import _risco, detalhe_cliente, main

DADOS = {
    "months": [
        {
            "id": "Junho",
            "name": "Junho",
            "byPerson": {},
            "byClient": {
                "Seguradora A": {"name": "Seguradora A", "logged": 185, "faturavel": True},
                "Interno": {"name": "Interno", "logged": 15, "faturavel": True},
            },
            "rawEntries": [
                {"p": "Ana", "n": "Seguros", "c": "Seguradora A", "e": "[SEG] - Parecer", "t": 120},
                {"p": "Ana", "n": "Seguros", "c": "Seguradora A", "e": "1. Parecer", "t": 60},
                {"p": "Rui", "n": "Seguros", "c": "Seguradora A", "e": "Email", "t": 5},
                {"p": "Rui", "n": "Controladoria", "c": "Interno", "e": "Fecho", "t": 15},
            ],
        },
        {
            "id": "Julho",
            "name": "Julho",
            "byPerson": {},
            "byClient": {
                "Seguradora A": {"name": "Seguradora A", "logged": 60, "faturavel": True},
                "Interno": {"name": "Interno", "logged": 40, "faturavel": False},
            },
            "rawEntries": [
                {"p": "Ana", "n": "Seguros", "c": "Seguradora A", "e": "Reunião", "t": 30},
                {"p": "Bia", "c": "Seguradora A", "e": "Reunião", "t": 30},
                {"p": "Bia", "n": "Controladoria", "c": "Interno", "e": "Fecho", "t": 40},
            ],
        },
    ]
}


def test_cliente_em_todos_os_meses():
    detalhe = detalhe_cliente(DADOS, "seguradora a")

    assert detalhe["name"] == "Seguradora A"
    assert detalhe["mes"] is None
    assert detalhe["minutos"] == 245
    assert detalhe["share"] == pytest.approx(81.7)
    assert detalhe["equipa"] == 3
    assert detalhe["entries"] == 5
    assert detalhe["topColaboradores"] == [
        {"name": "Ana", "minutos": 210},
        {"name": "Bia", "minutos": 30},
        {"name": "Rui", "minutos": 5},
    ]
    assert detalhe["perfilDemanda"] == [
        {"name": "Parecer", "minutos": 180},
        {"name": "Reunião", "minutos": 60},
        {"name": "Email", "minutos": 5},
    ]
    assert detalhe["evolucao"] == [{"mes": "Junho", "minutos": 185}, {"mes": "Julho", "minutos": 60}]
    assert detalhe["concentracao"] == {
        "top1Share": pytest.approx(85.7),
        "top3Share": 100.0,
        "topPerson": "Ana",
        "risco": "Alta Dependência",
        "totalPessoas": 3,
    }


def test_cliente_num_so_mes():
    detalhe = detalhe_cliente(DADOS, "Seguradora A", "julho")

    assert detalhe["mes"] == "Julho"
    assert detalhe["minutos"] == 60
    assert detalhe["share"] == 60.0
    assert detalhe["concentracao"]["top1Share"] == 50.0
    assert detalhe["concentracao"]["risco"] == "Concentrado"
    # a evolução mostra sempre o ano inteiro
    assert [m["mes"] for m in detalhe["evolucao"]] == ["Junho", "Julho"]


def test_faturavel_segue_o_mes_mais_recente():
    assert detalhe_cliente(DADOS, "Interno")["faturavel"] is False
    assert detalhe_cliente(DADOS, "Interno", "Junho")["faturavel"] is False


def test_cliente_desconhecido():
    assert detalhe_cliente(DADOS, "Ninguém") is None
    assert detalhe_cliente({"months": []}, "Seguradora A") is None


def test_cliente_sem_lancamentos_no_mes():
    dados = {"months": DADOS["months"] + [{"id": "Agosto", "name": "Agosto", "rawEntries": []}]}
    detalhe = detalhe_cliente(dados, "Interno", "Agosto")
    assert detalhe["minutos"] == 0
    assert detalhe["share"] == 0
    assert detalhe["concentracao"]["topPerson"] == "-"
    assert detalhe["concentracao"]["risco"] == "Diversificado"


def test_risco_por_concentracao():
    assert _risco(40) == "Diversificado"
    assert _risco(40.1) == "Concentrado"
    assert _risco(60) == "Concentrado"
    assert _risco(60.1) == "Alta Dependência"


def test_cli(tmp_path, capsys):
    data_file = tmp_path / "data.json"
    data_file.write_text(json.dumps(DADOS), encoding="utf-8")

    assert main(["Seguradora A", "--dados", str(data_file)]) == 0
    out = capsys.readouterr().out
    assert "Alta Dependência" in out
    assert "Parecer: 3h00m" in out

    assert main(["Seguradora A", "--mes", "Abril", "--dados", str(data_file)]) == 1
    assert main(["Ninguém", "--dados", str(data_file)]) == 1
