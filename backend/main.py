"""
FastAPI backend service for statement conversion.
"""
from fastapi import FastAPI, File, UploadFile, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
import tempfile
import shutil
from pathlib import Path
import logging

from applecard.core.runner import StatementConverter
from applecard.core.detectors import TemplateDetector, detect_template
from applecard.core.writer import write_csv
from applecard.core.errors import StatementFormatError, StatementError

app = FastAPI(title="Apple Card Statement Converter", version="1.0.0")

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:5173", "http://localhost:3000"],  # Vite and other dev servers
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def _save_upload(file: UploadFile) -> Path:
    """Copy an uploaded PDF to a temporary file."""
    if not file.filename or not file.filename.lower().endswith('.pdf'):
        raise HTTPException(status_code=400, detail="File must be a PDF")

    with tempfile.NamedTemporaryFile(delete=False, suffix='.pdf') as tmp_file:
        tmp_path = Path(tmp_file.name)
        try:
            shutil.copyfileobj(file.file, tmp_file)
        except OSError as e:
            tmp_file.close()
            tmp_path.unlink()
            logger.error(f"Error saving upload {file.filename}: {e}")
            raise HTTPException(status_code=500, detail=f"Error saving upload: {str(e)}")
    return tmp_path


@app.get("/")
def root():
    """Health check endpoint."""
    return {"message": "Apple Card Statement Converter API", "status": "healthy"}


@app.post("/convert")
def convert_pdf(file: UploadFile = File(...), format: str = "csv",
                template: str = "apple_card_v1", strict: bool = False):
    """
    Convert a statement PDF and return its transactions.

    Args:
        file: Uploaded PDF file
        format: "csv" for text/csv, "json" for the parsed statement
        template: Template ID to use (default: apple_card_v1)
        strict: Reject statements that do not fit the layout

    Returns:
        CSV text or parsed statement JSON
    """
    if format not in ("csv", "json"):
        raise HTTPException(status_code=400, detail=f"Unsupported format: {format}")

    tmp_path = _save_upload(file)
    try:
        logger.info(f"Processing PDF: {file.filename}")

        converter = StatementConverter(template, strict=strict)
        statement = converter.parse_lines(converter.read_lines(tmp_path), source=file.filename)

        logger.info(f"Successfully parsed PDF: {len(statement.transactions)} transactions found")

        if format == "json":
            return JSONResponse(content={
                "success": True,
                "data": statement.model_dump(),
                "template_used": template,
                "summary": {
                    "transactions_count": len(statement.transactions),
                    "warnings_count": len(statement.warnings)
                }
            })

        return Response(content=write_csv(statement.transactions), media_type="text/csv")

    except StatementFormatError as e:
        logger.error(f"Statement layout error: {e}")
        raise HTTPException(status_code=422, detail=str(e))

    except (StatementError, ValueError) as e:
        logger.error(f"Error converting PDF: {e}")
        raise HTTPException(status_code=500, detail=f"Error converting PDF: {str(e)}")

    finally:
        # Clean up temporary file
        if tmp_path.exists():
            tmp_path.unlink()


@app.post("/detect-template")
def detect_pdf_template(file: UploadFile = File(...)):
    """
    Detect which template matches a PDF file.

    Args:
        file: Uploaded PDF file

    Returns:
        Detected template ID
    """
    tmp_path = _save_upload(file)
    try:
        template = detect_template(tmp_path)
    finally:
        if tmp_path.exists():
            tmp_path.unlink()

    if not template:
        raise HTTPException(status_code=400, detail="No matching template found")

    return JSONResponse(content={
        "success": True,
        "template": template
    })


@app.get("/templates")
def list_templates():
    """List all available templates."""
    detector = TemplateDetector()
    return JSONResponse(content={
        "success": True,
        "templates": [
            {
                "id": template_id,
                "issuer": detector.get_template(template_id).get('issuer'),
                "description": detector.get_template(template_id).get('description')
            }
            for template_id in detector.list_templates()
        ]
    })


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
