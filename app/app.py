# app.py
import io
import os
import logging
import streamlit as st
from PIL import Image
from datetime import datetime
import sys
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from emojify.config import load_config
from emojify.core import Emojifier
from emojify.models import EmojifyResult

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO"),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)

# ---------- Page ----------
st.set_page_config(page_title="Emojify", page_icon="😜", layout="centered")
st.title("Emojify")
st.caption("Camera or image upload → every face gets the emoji matching its smile and eyes.")

# ---------- Emojifier ----------
config = load_config()

def notify_no_face(message: str) -> None:
    st.warning(f"{message}. Try better lighting/framing.")

emojifier = Emojifier(config=config, notify=notify_no_face)

# ---------- UI helpers ----------
def show_details(res: EmojifyResult) -> None:
    with st.expander(f"Details ({res.face_count} face(s))"):
        st.json([
            {
                "face": fr.index,
                "box": [round(fr.face.x), round(fr.face.y), round(fr.face.width), round(fr.face.height)],
                "smiling": round(fr.face.smiling_probability, 3),
                "left_eye_open": round(fr.face.left_eye_open_probability, 3),
                "right_eye_open": round(fr.face.right_eye_open_probability, 3),
                "expression": fr.expression.name if fr.expression else None,
                "error": fr.error,
            }
            for fr in res.faces
        ])

def emojify_and_show(pil_img: Image.Image, origin_name: str) -> None:
    try:
        res = emojifier.analyze(pil_img)
    except Exception as e:
        st.error(f"Emojify error: {e}"); return

    st.image(res.image, caption="Emojified", use_container_width=True)
    show_details(res)

    buf = io.BytesIO()
    res.image.save(buf, format="PNG")
    base = os.path.splitext(origin_name)[0]
    st.download_button("⬇️ Download", data=buf.getvalue(), file_name=f"{base}_emojified.png", mime="image/png")

# ---------- Sidebar ----------
with st.sidebar:
    st.header("Settings")
    st.markdown(
        f"Smiling threshold: <b>{config.smiling_threshold}</b><br>"
        f"Eye-open threshold: <b>{config.eye_open_threshold}</b><br>"
        f"Emoji scale: <b>{config.emoji_scale_factor}</b>",
        unsafe_allow_html=True,
    )

# ---------- Modes ----------
mode = st.radio("Choose input mode", ["📷 Camera", "🖼️ Image upload"], horizontal=True)

if mode.startswith("📷"):
    img_input = st.camera_input("Camera (allow access, then take a snapshot)")
    if img_input is not None:
        frame = Image.open(img_input).convert("RGB")
        emojify_and_show(frame, f"camera_{int(datetime.now().timestamp())}.jpg")
else:
    file = st.file_uploader("Upload an image", type=["jpg", "jpeg", "png"])
    if file is not None:
        pil = Image.open(file).convert("RGB")
        st.image(pil, caption="Uploaded image", use_container_width=True)
        if st.button("😜 Emojify"):
            emojify_and_show(pil, file.name)
