# kn_interpreter/api/__init__.py
# ===============================
# API Layer — Kannada Interpreter
#
#   - bridge.py      BrowserChannel + browser-backed Recognizer/Synthesizer
#   - connection.py  One WebSocket connection = one Controller
#   - app.py         FastAPI app: /api/v1/health, /api/v1/translate, /ws
