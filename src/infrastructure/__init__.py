# Infrastructure Layer
# ====================
# Contains all external service integrations:
# - persistence/: SQLite learner profile store
# - llm/: Groq chat-completion client (conversational answers)
# - whatsapp/: Twilio WhatsApp delivery provider
# - config/: Environment and settings management
# - http: bounded retry for outbound HTTP calls
#
# This layer can be replaced entirely without affecting domain/application layers.
