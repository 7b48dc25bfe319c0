from fastapi import FastAPI

from billintel.core.logging import setup_logging
from billintel.middleware.cors import setup_cors
from billintel.modules.analysis.router import router as analysis_router

setup_logging()


app = FastAPI(title="BillIntel API")

setup_cors(app)

app.include_router(analysis_router)
