from typing import Any, Dict, Iterable, List, Optional

from modelos import RegistoMes
from normalizacao import canonicalizar_nome, extrair_campos, parse_horas_disponiveis

COLUNAS_GERENCIAL = [
    ("nome", ("Nome", "Colaborador")),
    ("horas", ("Tempo disponível", "Horas Disponíveis", "Meta", "Available")),
]


def encontrar_pessoa(nome: str, chaves: Iterable[str]) -> Optional[str]:
    """
    Procura, entre as chaves conhecidas (nomes da analítica), a pessoa a que
    corresponde um nome da gerencial.

      1) match exato do nome canónico
      2) senão, a primeira chave cujo nome canónico contém o nome procurado
         (ou é contida por ele), por ordem de iteração

    Não há desempate: "Rafael" apanha o primeiro "Rafael ..." que aparecer.
    """
    alvo = canonicalizar_nome(nome)
    if not alvo:
        return None

    candidatas = [(chave, canonicalizar_nome(chave)) for chave in chaves]

    for chave, canon in candidatas:
        if canon == alvo:
            return chave

    for chave, canon in candidatas:
        if not canon:
            continue
        if alvo in canon or canon in alvo:
            return chave

    return None


def enriquecer_gerencial(
    linhas: Iterable[Dict[str, Any]],
    mes: RegistoMes,
    sem_match: Optional[List[str]] = None,
) -> RegistoMes:
    """
    2.ª passagem: reescreve a disponibilidade (minutos) das pessoas do mês com
    as horas da planilha gerencial. Nunca cria pessoas novas.

    Linhas sem nome ou com horas <= 0 são ignoradas em silêncio; nomes sem
    correspondência na analítica são avisados (e acrescentados a `sem_match`).
    """
    atualizados = 0
    for linha in linhas:
        campos = extrair_campos(linha, COLUNAS_GERENCIAL)
        nome = str(campos["nome"]).strip() if campos["nome"] is not None else ""
        horas = parse_horas_disponiveis(campos["horas"])

        if not nome or horas <= 0:
            continue

        chave = encontrar_pessoa(nome, mes.byPerson.keys())
        if chave is None:
            print(
                f"[GERENCIAL] WARNING: sem match na analítica: {nome} "
                f"({canonicalizar_nome(nome)}) - ignorado"
            )
            if sem_match is not None:
                sem_match.append(nome)
            continue

        mes.byPerson[chave].available = int(round(horas * 60))
        atualizados += 1

    print(f"[GERENCIAL] {mes.name}: disponibilidade atualizada para {atualizados} pessoas")
    return mes
