from dataclasses import dataclass, field
from typing import Any, Dict, List

from config import DISPONIVEL_PADRAO_MINUTOS


def numero_json(valor: float) -> Any:
    """Floats inteiros (30.0) saem como inteiros no JSON."""
    if isinstance(valor, float) and valor.is_integer():
        return int(valor)
    return valor


@dataclass(frozen=True)
class Lancamento:
    """Uma linha da analítica (um lançamento de tempo)."""

    pessoa: str
    nucleo: str
    cliente: str
    evento: str
    minutos: float
    descricao: str = ""
    lag: float = 0.0
    data: str = ""

    def to_dict(self) -> Dict[str, Any]:
        # chaves curtas: é o formato que o painel lê em rawEntries
        return {
            "p": self.pessoa,
            "n": self.nucleo,
            "c": self.cliente,
            "e": self.evento,
            "t": numero_json(self.minutos),
            "d": self.descricao,
            "l": numero_json(self.lag),
            "dt": self.data,
        }


@dataclass
class EstatisticaPessoa:
    name: str
    available: float = DISPONIVEL_PADRAO_MINUTOS
    logged: float = 0.0
    entries: int = 0
    fragments: int = 0
    fragmentTime: float = 0.0
    totalLag: float = 0.0
    lagCount: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "available": numero_json(self.available),
            "logged": numero_json(self.logged),
            "entries": self.entries,
            "fragments": self.fragments,
            "fragmentTime": numero_json(self.fragmentTime),
            "totalLag": numero_json(self.totalLag),
            "lagCount": self.lagCount,
        }


@dataclass
class EstatisticaNucleo:
    name: str
    logged: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "logged": numero_json(self.logged)}


@dataclass
class EstatisticaCliente:
    name: str
    logged: float = 0.0
    faturavel: bool = True

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "logged": numero_json(self.logged),
            "faturavel": self.faturavel,
        }


@dataclass
class RegistoMes:
    """
    Acumulador de um mês. A analítica cria pessoas, núcleos e clientes; a
    gerencial só reescreve `available` das pessoas que já existem. Os totais
    são derivados de byPerson (ver recalcular_totais).
    """

    id: str
    name: str
    totalAvailable: float = 0.0
    totalLogged: float = 0.0
    byPerson: Dict[str, EstatisticaPessoa] = field(default_factory=dict)
    byNucleo: Dict[str, EstatisticaNucleo] = field(default_factory=dict)
    byClient: Dict[str, EstatisticaCliente] = field(default_factory=dict)
    rawEntries: List[Lancamento] = field(default_factory=list)

    @classmethod
    def vazio(cls, rotulo: str) -> "RegistoMes":
        return cls(id=rotulo, name=rotulo)

    def recalcular_totais(self) -> "RegistoMes":
        self.totalLogged = sum(p.logged for p in self.byPerson.values())
        self.totalAvailable = sum(p.available for p in self.byPerson.values())
        return self

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "totalAvailable": numero_json(float(self.totalAvailable)),
            "totalLogged": numero_json(float(self.totalLogged)),
            "byPerson": {k: v.to_dict() for k, v in self.byPerson.items()},
            "byNucleo": {k: v.to_dict() for k, v in self.byNucleo.items()},
            "byClient": {k: v.to_dict() for k, v in self.byClient.items()},
            "rawEntries": [e.to_dict() for e in self.rawEntries],
        }
