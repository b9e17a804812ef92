# api/api.py
import os
import io
import logging
from typing import Optional
from datetime import datetime

from fastapi import FastAPI, UploadFile, File, HTTPException
from fastapi.responses import Response
from fastapi.middleware.cors import CORSMiddleware
from PIL import Image, UnidentifiedImageError

import sys
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from emojify.config import load_config
from emojify.core import Emojifier
from emojify.models import AnalyzeResponse, EmojifyResult, FaceResponse

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO"),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

# ------------ Config ------------
config = load_config()
logger.info(f"🔧 Detector backend: {config.detector_backend}, scale factor: {config.emoji_scale_factor}")

# ------------ App ------------
app = FastAPI(title="Emojify API", version="1.0.0")
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"], allow_credentials=True,
    allow_methods=["*"], allow_headers=["*"],
)

emojifier = Emojifier(config=config)

# ------------ Helpers ------------
def _now_iso() -> str:
    return datetime.utcnow().replace(microsecond=0).isoformat() + "Z"

def _basename_from(filename: Optional[str]) -> str:
    if not filename:
        return f"capture_{datetime.now().strftime('%Y%m%d_%H%M%S')}"
    return os.path.splitext(os.path.basename(filename))[0]

async def _read_image(file: UploadFile) -> Image.Image:
    try:
        raw = await file.read()
        pil = Image.open(io.BytesIO(raw))
        pil.load()
    except (UnidentifiedImageError, OSError):
        raise HTTPException(status_code=400, detail="Invalid image file")
    return pil.convert("RGB")

def _face_responses(res: EmojifyResult) -> list[FaceResponse]:
    return [
        FaceResponse(
            x=fr.face.x, y=fr.face.y, width=fr.face.width, height=fr.face.height,
            smiling_probability=fr.face.smiling_probability,
            left_eye_open_probability=fr.face.left_eye_open_probability,
            right_eye_open_probability=fr.face.right_eye_open_probability,
            expression=fr.expression.name if fr.expression else None,
            error=fr.error,
        )
        for fr in res.faces
    ]

def _run(pil: Image.Image) -> EmojifyResult:
    try:
        return emojifier.analyze(pil)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))
    except Exception as e:
        logger.exception("Emojify failed")
        raise HTTPException(status_code=500, detail=f"Emojify error: {e}")

# ------------ Endpoints ------------
@app.get("/health")
async def health():
    return {"status": "ok", "time": _now_iso(), "backend": config.detector_backend}

@app.post("/emojify")
async def emojify(file: UploadFile = File(...)):
    pil = await _read_image(file)
    res = _run(pil)

    buf = io.BytesIO()
    res.image.save(buf, format="PNG")
    return Response(
        content=buf.getvalue(),
        media_type="image/png",
        headers={
            "X-Faces-Detected": str(res.face_count),
            "Content-Disposition": f'inline; filename="{_basename_from(file.filename)}_emojified.png"',
        },
    )

@app.post("/analyze", response_model=AnalyzeResponse)
async def analyze(file: UploadFile = File(...)):
    pil = await _read_image(file)
    res = _run(pil)

    return AnalyzeResponse(
        timestamp_utc=_now_iso(),
        image_filename=f"{_basename_from(file.filename)}.png",
        image_width=pil.width,
        image_height=pil.height,
        face_count=res.face_count,
        faces=_face_responses(res),
    )
