# Absolute Learner - WhatsApp Daily Learning Bot
# ================================================
# One skill a day, delivered over WhatsApp, using Layered Architecture:
#
# ARCHITECTURE LAYERS:
# - Presentation:   FastAPI webhook (inbound messages)
# - Application:    Orchestrator routing a message to a reply
# - Domain:         Topic rotation and plan text (no external dependencies)
# - Infrastructure: External services (SQLite, Groq LLM, Twilio WhatsApp)
#
# Infrastructure components can be swapped (e.g. SQLite for another store,
# Groq for another OpenAI-compatible provider) without touching the domain.
