"""Defaults for the vision LLM that are tracked in Git."""

# OpenAI-compatible endpoint serving the vision models below.
DEFAULT_VISION_BASE_URL = "https://api.groq.com/openai/v1"

# Candidate models, tried in order until one answers.
DEFAULT_VISION_MODELS = (
    "meta-llama/llama-4-maverick-17b-128e-instruct",
    "meta-llama/llama-4-scout-17b-16e-instruct",
)

# Kept low so the JSON layout stays stable between calls.
DEFAULT_VISION_TEMPERATURE = 0.1
DEFAULT_VISION_MAX_TOKENS = 1024

VISION_PLACEHOLDER_KEY = "YOUR_GROQ_API_KEY_HERE"

# Canonical prompt for nutrition analysis requests.
DEFAULT_VISION_PROMPT = (
    "Analyze this image carefully. If you can see any food items, identify them "
    "and provide nutritional values in JSON format:\n"
    '{"has_food":true, "items":[{"item_name":"food name", "total_calories":number, '
    '"total_protein":number, "total_carbs":number, "total_fats":number}]}\n\n'
    "If there is NO food visible in the image, respond with exactly:\n"
    '{"has_food":false, "items":[]}\n\n'
    "Only identify actual food items that are clearly visible. Do not guess or assume. "
    "Only output JSON format. NO ADDITIONAL TEXT!"
)
