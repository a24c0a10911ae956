# Presentation Layer
# ==================
# FastAPI webhook receiving WhatsApp messages from Twilio.
