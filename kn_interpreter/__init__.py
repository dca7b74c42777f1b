# kn_interpreter/__init__.py
# ===========================
# Kannada ⇄ English Interpreter — capture-and-respond core
#
# Layers:
#   - stt/          Recognizer contract + transcript accumulation
#   - translation/  Provider contract + primary/secondary cascade
#   - tts/          Synthesizer contract + voice selection + playback
#   - session/      Capture Session Controller (state machine)
#   - api/          Browser WebSocket bridge + FastAPI surface

__version__ = "1.0.0"
