"""
Plan Generator - Daily Mission Text
===================================

WhatsApp renders *bold* markup, so the template below is sent verbatim
with only the topic substituted.
"""

GREETING = "👋 Welcome back, Absolute Learner!\n\n"

PLAN_TEMPLATE = """
📘 *Today's Mission:* {topic}

🕒 *Morning* – Watch 2 beginner-level videos on {topic} (YT or FreeCodeCamp)
💻 *Afternoon* – Build a hands-on project or complete an interactive tutorial
🧠 *Evening* – Quiz yourself, write 5 takeaways, and reflect

Reply with "done" after each step to log progress or ask questions anytime!
"""


def generate_plan(topic: str) -> str:
    """Render the three-slot daily plan for a topic."""
    # str.replace keeps braces inside topic names intact
    return PLAN_TEMPLATE.replace("{topic}", topic)


def compose_greeting(plan: str) -> str:
    return f"{GREETING}{plan}"
