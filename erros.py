import os


class IngestaoError(Exception):
    """Erro fatal da ingestão: a execução é abortada e nada é gravado."""


class ArmazemInvalidoError(IngestaoError):
    """O ficheiro de dados existe mas não é um JSON válido."""


class PlanilhaInvalidaError(IngestaoError):
    """A planilha não abre ou não tem folhas."""

    def __init__(self, caminho: str, motivo: str):
        self.caminho = caminho
        self.motivo = motivo
        super().__init__(f"{os.path.basename(caminho)}: {motivo}")
