from typing import Any, Dict, Iterable

from config import LIMITE_FRAGMENTO_MINUTOS, NUCLEO_PADRAO
from modelos import (
    EstatisticaCliente,
    EstatisticaNucleo,
    EstatisticaPessoa,
    Lancamento,
    RegistoMes,
)
from normalizacao import _para_float, data_para_texto, extrair_campos

# Colunas reais da exportação analítica do escritório, com fallbacks em inglês.
# A ordem conta: ganha o primeiro alias preenchido.
COLUNAS_ANALITICA = [
    ("pessoa", ("Nome", "Colaborador", "Resource")),
    ("cliente", ("Cliente", "Customer")),
    ("nucleo", ("Núcleo", "Nucleo")),
    ("evento", ("Descrição do evento", "Atividade", "Task")),
    ("descricao", ("Descrição da atividade", "Descrição")),
    ("minutos", ("Tempo lançado", "Tempo (min)", "Time")),
    ("data", ("Lançamento para", "Data", "Date")),
    ("lag", ("Lag",)),
]


def _texto(valor: Any) -> str:
    if valor is None:
        return ""
    return str(valor).strip()


def _ler_lancamento(linha: Dict[str, Any]):
    """Converte uma linha da analítica em Lancamento; None se faltar pessoa/cliente/evento."""
    campos = extrair_campos(linha, COLUNAS_ANALITICA)

    pessoa = _texto(campos["pessoa"])
    cliente = _texto(campos["cliente"])
    evento = _texto(campos["evento"])
    if not pessoa or not cliente or not evento:
        return None

    return Lancamento(
        pessoa=pessoa,
        nucleo=_texto(campos["nucleo"]) or NUCLEO_PADRAO,
        cliente=cliente,
        evento=evento,
        minutos=max(0.0, _para_float(campos["minutos"])),
        descricao=_texto(campos["descricao"]),
        lag=_para_float(campos["lag"]),
        data=data_para_texto(campos["data"]),
    )


def _somar_lancamento(mes: RegistoMes, lanc: Lancamento) -> None:
    pessoa = mes.byPerson.get(lanc.pessoa)
    if pessoa is None:
        pessoa = mes.byPerson[lanc.pessoa] = EstatisticaPessoa(name=lanc.pessoa)

    pessoa.logged += lanc.minutos
    pessoa.entries += 1
    pessoa.totalLag += lanc.lag
    pessoa.lagCount += 1
    if lanc.minutos < LIMITE_FRAGMENTO_MINUTOS:
        pessoa.fragments += 1
        pessoa.fragmentTime += lanc.minutos

    nucleo = mes.byNucleo.get(lanc.nucleo)
    if nucleo is None:
        nucleo = mes.byNucleo[lanc.nucleo] = EstatisticaNucleo(name=lanc.nucleo)
    nucleo.logged += lanc.minutos

    cliente = mes.byClient.get(lanc.cliente)
    if cliente is None:
        cliente = mes.byClient[lanc.cliente] = EstatisticaCliente(name=lanc.cliente)
    cliente.logged += lanc.minutos


def ingerir_analitica(linhas: Iterable[Dict[str, Any]], mes: RegistoMes) -> RegistoMes:
    """
    1.ª passagem: lê as linhas da analítica para dentro de `mes`.

    Cada linha válida vira um lançamento em rawEntries e soma nas estatísticas
    da pessoa (criada com a disponibilidade por omissão), do núcleo e do
    cliente. Linhas sem pessoa, cliente ou evento são ignoradas sem aviso.
    Devolve o mesmo `mes`, para se poder compor com enriquecer_gerencial.
    """
    validas = 0
    ignoradas = 0
    for linha in linhas:
        lanc = _ler_lancamento(linha)
        if lanc is None:
            ignoradas += 1
            continue
        mes.rawEntries.append(lanc)
        _somar_lancamento(mes, lanc)
        validas += 1

    print(
        f"[ANALITICA] {mes.name}: {validas} lançamentos, "
        f"{len(mes.byPerson)} pessoas, {len(mes.byClient)} clientes "
        f"({ignoradas} linhas sem pessoa/cliente/evento)"
    )
    return mes
