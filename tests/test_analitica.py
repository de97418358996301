from analitica import ingerir_analitica
from config import DISPONIVEL_PADRAO_MINUTOS
from modelos import RegistoMes


def _mes():
    return RegistoMes.vazio("Dezembro")


def test_um_lancamento():
    mes = ingerir_analitica([{"Nome": "Ana", "Cliente": "X", "Atividade": "Task", "Tempo lançado": 30}], _mes())

    ana = mes.byPerson["Ana"]
    assert ana.logged == 30
    assert ana.entries == 1
    assert ana.fragments == 0
    assert ana.available == DISPONIVEL_PADRAO_MINUTOS
    assert len(mes.rawEntries) == 1


def test_fragmento_abaixo_de_dez_minutos():
    linhas = [
        {"Nome": "Ana", "Cliente": "X", "Atividade": "Task", "Tempo lançado": 30},
        {"Nome": "Ana", "Cliente": "X", "Atividade": "Task", "Tempo lançado": 5},
        {"Nome": "Ana", "Cliente": "X", "Atividade": "Task", "Tempo lançado": 10},
    ]
    ana = ingerir_analitica(linhas, _mes()).byPerson["Ana"]
    assert ana.fragments == 1
    assert ana.fragmentTime == 5
    assert ana.logged == 45
    assert ana.entries == 3


def test_linhas_incompletas_sao_ignoradas():
    linhas = [
        {"Cliente": "X", "Atividade": "Task", "Tempo lançado": 30},
        {"Nome": "Ana", "Atividade": "Task", "Tempo lançado": 30},
        {"Nome": "Ana", "Cliente": "X", "Tempo lançado": 30},
        {"Nome": "   ", "Cliente": "X", "Atividade": "Task"},
    ]
    mes = ingerir_analitica(linhas, _mes())
    assert mes.rawEntries == []
    assert mes.byPerson == {}
    assert mes.byClient == {}


def test_valores_por_omissao_e_aliases_em_ingles():
    mes = ingerir_analitica(
        [{"Resource": "Bob", "Customer": "ACME", "Task": "Review", "Time": "abc"}],
        _mes(),
    )
    lanc = mes.rawEntries[0]
    assert lanc.nucleo == "Geral"
    assert lanc.minutos == 0
    assert lanc.lag == 0
    assert lanc.data == ""
    assert mes.byNucleo["Geral"].logged == 0
    # 0 minutos conta como fragmento
    assert mes.byPerson["Bob"].fragments == 1


def test_agregados_por_nucleo_e_cliente():
    linhas = [
        {"Nome": "Ana", "Cliente": "X", "Núcleo": "Contratos", "Descrição do evento": "A", "Tempo lançado": 20, "Lag": 3},
        {"Nome": "Rui", "Cliente": "X", "Nucleo": "Contratos", "Descrição do evento": "B", "Tempo lançado": 40, "Lag": 1},
        {"Nome": "Rui", "Cliente": "Y", "Núcleo": "Seguros", "Descrição do evento": "C", "Tempo lançado": "15"},
    ]
    mes = ingerir_analitica(linhas, _mes())

    assert mes.byNucleo["Contratos"].logged == 60
    assert mes.byNucleo["Seguros"].logged == 15
    assert mes.byClient["X"].logged == 60
    assert mes.byClient["X"].faturavel is True
    assert mes.byPerson["Rui"].totalLag == 1
    assert mes.byPerson["Rui"].lagCount == 2
    assert mes.byPerson["Ana"].totalLag == 3


def test_lancamento_formato_json():
    mes = ingerir_analitica(
        [{
            "Nome": "Ana",
            "Cliente": "X",
            "Descrição do evento": "Audiência",
            "Descrição da atividade": "Preparação",
            "Tempo lançado": 30.0,
            "Lançamento para": 45000,
            "Lag": 2,
        }],
        _mes(),
    )
    assert mes.rawEntries[0].to_dict() == {
        "p": "Ana",
        "n": "Geral",
        "c": "X",
        "e": "Audiência",
        "t": 30,
        "d": "Preparação",
        "l": 2,
        "dt": "15/03/2023",
    }


def test_totais_derivados_de_by_person():
    linhas = [
        {"Nome": "Ana", "Cliente": "X", "Atividade": "A", "Tempo lançado": 20},
        {"Nome": "Rui", "Cliente": "Y", "Atividade": "B", "Tempo lançado": 40},
    ]
    mes = ingerir_analitica(linhas, _mes()).recalcular_totais()
    assert mes.totalLogged == sum(p.logged for p in mes.byPerson.values()) == 60
    assert mes.totalAvailable == 2 * DISPONIVEL_PADRAO_MINUTOS
