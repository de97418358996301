from fastapi import FastAPI

from clientes import router as clientes_router
from comparacao import router as comparacao_router
from ingestao import router as ingestao_router
from resumo import router as resumo_router

app = FastAPI(title="PAINEL TIMESHEET API")

# ========= INCLUSÃO DOS MÓDULOS =========

app.include_router(ingestao_router)
app.include_router(resumo_router)
app.include_router(clientes_router)
app.include_router(comparacao_router)
