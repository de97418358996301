from meses import agrupar_ficheiros, detetar_mes, detetar_tipo


def test_detetar_mes_e_tipo():
    assert detetar_mes("Gerencial - Dezembro.xlsx") == "Dezembro"
    assert detetar_tipo("Gerencial - Dezembro.xlsx") == "gerencial"
    assert detetar_mes("Analitico - Dezembro.xlsx") == "Dezembro"
    assert detetar_tipo("Analitico - Dezembro.xlsx") == "analitica"


def test_marco_sem_cedilha_e_nfd():
    assert detetar_mes("Metas_marco.xlsx") == "Março"
    assert detetar_mes("Analitica MARÇO.xlsx") == "Março"
    # cedilha decomposta (NFD), como chega de alguns sistemas de ficheiros
    assert detetar_mes("Analitica Março.xlsx") == "Março"


def test_tipo_ambiguo_e_analitico():
    assert detetar_tipo("Julho.xlsx") == "analitica"
    assert detetar_tipo("julho_disponibilidade.xlsx") == "gerencial"
    assert detetar_tipo("Metas Julho.xlsx") == "gerencial"


def test_agrupar_pares_por_mes():
    avisos = []
    grupos = agrupar_ficheiros(
        [
            "/up/Analitico - Dezembro.xlsx",
            "/up/Gerencial - Dezembro.xlsx",
            "/up/export_final.xlsx",
            "/up/Novembro_Analitica.xlsx",
        ],
        avisos,
    )

    assert list(grupos) == ["Dezembro", "Novembro"]
    assert grupos["Dezembro"].analitica == "/up/Analitico - Dezembro.xlsx"
    assert grupos["Dezembro"].gerencial == "/up/Gerencial - Dezembro.xlsx"
    assert grupos["Novembro"].gerencial is None
    assert len(avisos) == 1
    assert "export_final.xlsx" in avisos[0]


def test_colisao_fica_o_ultimo():
    avisos = []
    grupos = agrupar_ficheiros(["Analitica Maio v1.xlsx", "Analitica Maio v2.xlsx"], avisos)
    assert grupos["Maio"].analitica == "Analitica Maio v2.xlsx"
    assert len(avisos) == 1
    assert "Maio" in avisos[0]
