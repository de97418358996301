import os

BASE_DIR = os.path.dirname(os.path.abspath(__file__))

# Ficheiro JSON com todos os meses agregados (lido pelo painel)
DATA_FILE = os.environ.get(
    "TIMESHEET_DATA_FILE",
    os.path.join(BASE_DIR, "data", "data.json"),
)

# Pasta onde ficam as planilhas exportadas (analítica + gerencial por mês)
UPLOADS_DIR = os.environ.get(
    "TIMESHEET_UPLOADS_DIR",
    os.path.join(BASE_DIR, "data", "uploads"),
)

EXTENSOES_PLANILHA = (".xlsx", ".xlsm")

# Disponibilidade por omissão quando a gerencial não traz a pessoa (168h)
DISPONIVEL_PADRAO_MINUTOS = 168 * 60

# Lançamentos abaixo deste limite contam como fragmentados
LIMITE_FRAGMENTO_MINUTOS = 10

NUCLEO_PADRAO = "Geral"
