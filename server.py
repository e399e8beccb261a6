# Site Visit render service (FastAPI)
#
#   uvicorn server:app --port 8000
#   python server.py

import logging

import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, Response
from fastapi.concurrency import run_in_threadpool

from config import load_settings
from logging_config import setup_logging
from pdf_builder import build_visit_pdf
from schemas import VisitRecord

logger = logging.getLogger(__name__)

GENERIC_ERROR = "Failed to generate PDF"


def create_app(settings=None) -> FastAPI:
    settings = settings or load_settings()
    setup_logging(settings)

    app = FastAPI(title="Site Visit Report API", version="1.0")
    app.state.settings = settings

    @app.get("/")
    def home():
        return {"message": "Site Visit Report API"}

    @app.post("/api/generate-pdf")
    async def generate_pdf(request: Request):
        try:
            data = await request.json()
            record = VisitRecord.model_validate(data)
            pdf_bytes, file_name = await run_in_threadpool(
                build_visit_pdf, record, settings["maps_url_template"]
            )
        except Exception:
            logger.exception("Error generating PDF")
            return JSONResponse({"error": GENERIC_ERROR}, status_code=500)

        return Response(
            content=pdf_bytes,
            media_type="application/pdf",
            headers={"Content-Disposition": f'attachment; filename="{file_name}"'},
        )

    return app


app = create_app()


if __name__ == "__main__":
    uvicorn.run(app, host=app.state.settings["host"], port=int(app.state.settings["port"]))
